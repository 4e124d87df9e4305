"""Fixed-capacity, newest-first store of readings."""

from __future__ import annotations

from collections import deque
from typing import Deque

from models.records import TemperatureReading, Window


class BoundedWindow:
    """Keeps only the most recent ``capacity`` readings, newest at index 0.

    Readers only ever get tuples, so a snapshot never aliases the live store.
    """

    def __init__(self, capacity: int = 20) -> None:
        if capacity <= 0:
            raise ValueError(f"Window capacity must be positive, got {capacity}.")
        self.capacity = capacity
        self._readings: Deque[TemperatureReading] = deque(maxlen=capacity)

    def push(self, reading: TemperatureReading) -> Window:
        # appendleft on a full deque drops exactly one element from the right
        self._readings.appendleft(reading)
        assert len(self._readings) <= self.capacity
        return tuple(self._readings)

    def snapshot(self) -> Window:
        return tuple(self._readings)

    def clear(self) -> None:
        self._readings.clear()

    def __len__(self) -> int:
        return len(self._readings)
