from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_CAPACITY_ENV = "SENSOR_WINDOW_CAPACITY"
_INTERVAL_ENV = "SENSOR_TICK_INTERVAL_MS"
_VALUE_MIN_ENV = "SENSOR_VALUE_MIN"
_VALUE_MAX_ENV = "SENSOR_VALUE_MAX"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_WINDOW_CAPACITY = 20
DEFAULT_TICK_INTERVAL_MS = 2000
DEFAULT_VALUE_MIN = 65.0
DEFAULT_VALUE_MAX = 85.0


@dataclass(frozen=True)
class Settings:
    window_capacity: int
    tick_interval_ms: int
    value_min: float
    value_max: float
    log_level: str


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        return float(candidate)
    except ValueError:
        return default


def _read_value_range() -> tuple[float, float]:
    low = _read_float(_VALUE_MIN_ENV, DEFAULT_VALUE_MIN)
    high = _read_float(_VALUE_MAX_ENV, DEFAULT_VALUE_MAX)
    if low >= high:
        return DEFAULT_VALUE_MIN, DEFAULT_VALUE_MAX
    return low, high


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    value_min, value_max = _read_value_range()
    return Settings(
        window_capacity=_read_positive_int(_CAPACITY_ENV, DEFAULT_WINDOW_CAPACITY),
        tick_interval_ms=_read_positive_int(_INTERVAL_ENV, DEFAULT_TICK_INTERVAL_MS),
        value_min=value_min,
        value_max=value_max,
        log_level=_read_log_level("INFO"),
    )
