"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class RunState(str, Enum):
    """Whether the simulator is currently producing readings."""

    running = "running"
    paused = "paused"


@dataclass(frozen=True, slots=True)
class TemperatureReading:
    """A single simulated reading; ``timestamp`` is local time as ``HH:MM:SS``."""

    value: float
    timestamp: str


Window = Tuple[TemperatureReading, ...]


@dataclass(frozen=True, slots=True)
class WindowAggregates:
    """Statistics derived from one window snapshot; all ``None`` when empty."""

    current_value: Optional[float] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    average_value: Optional[float] = None


@dataclass(frozen=True, slots=True)
class SensorSnapshot:
    """Everything a consumer observes at one point in time.

    ``run_state`` is ``None`` until the monitor has been started.
    ``sequence`` increases by one for every publication.
    """

    readings: Window = ()
    aggregates: WindowAggregates = WindowAggregates()
    run_state: Optional[RunState] = None
    sequence: int = 0

    @property
    def current_value(self) -> Optional[float]:
        return self.aggregates.current_value

    @property
    def min_value(self) -> Optional[float]:
        return self.aggregates.min_value

    @property
    def max_value(self) -> Optional[float]:
        return self.aggregates.max_value

    @property
    def average_value(self) -> Optional[float]:
        return self.aggregates.average_value
