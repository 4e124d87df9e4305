"""Aggregation logic for a window of sensor readings."""

from __future__ import annotations

from typing import Optional

from models.records import Window, WindowAggregates


def current(window: Window) -> Optional[float]:
    """Value of the newest reading, or ``None`` for an empty window."""
    if not window:
        return None
    return window[0].value


def minimum(window: Window) -> Optional[float]:
    if not window:
        return None
    return min(reading.value for reading in window)


def maximum(window: Window) -> Optional[float]:
    if not window:
        return None
    return max(reading.value for reading in window)


def average(window: Window) -> Optional[float]:
    if not window:
        return None
    total = sum(reading.value for reading in window)
    return total / len(window)


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate(self, window: Window) -> WindowAggregates:
        return WindowAggregates(
            current_value=current(window),
            min_value=minimum(window),
            max_value=maximum(window),
            average_value=average(window),
        )
