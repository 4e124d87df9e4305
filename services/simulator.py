"""Periodic producer of simulated temperature readings."""

from __future__ import annotations

import asyncio
import logging
import random
from datetime import datetime
from typing import Awaitable, Callable, Optional

from models.records import TemperatureReading

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%H:%M:%S"

ReadingSink = Callable[[TemperatureReading], object]
# (stop, seconds) -> True if stop fired before the interval elapsed
WaitStrategy = Callable[[asyncio.Event, float], Awaitable[bool]]


class Simulator:
    """Generates one reading per tick and hands it to ``sink``.

    The first reading is produced as soon as :meth:`run` starts; each later
    one follows ``interval_ms`` after the previous. Values are drawn uniformly
    from ``[value_min, value_max)``.
    """

    def __init__(
        self,
        sink: ReadingSink,
        interval_ms: int = 2000,
        value_min: float = 65.0,
        value_max: float = 85.0,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = datetime.now,
        wait: Optional[WaitStrategy] = None,
    ) -> None:
        if interval_ms <= 0:
            raise ValueError(f"Tick interval must be positive, got {interval_ms}.")
        if value_min >= value_max:
            raise ValueError(
                f"Value range is empty: [{value_min}, {value_max})."
            )
        self._sink = sink
        self.interval_ms = interval_ms
        self.value_min = value_min
        self.value_max = value_max
        self._rng = rng or random.Random()
        self._clock = clock
        self._wait = wait or wait_for_stop

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000

    def generate_reading(self) -> TemperatureReading:
        span = self.value_max - self.value_min
        value = self.value_min + self._rng.random() * span
        return TemperatureReading(
            value=value,
            timestamp=self._clock().strftime(TIMESTAMP_FORMAT),
        )

    async def run(self, stop: asyncio.Event) -> int:
        """Produce readings until ``stop`` is set or the task is cancelled.

        Returns the number of readings produced. Once ``stop`` is set no
        further reading reaches the sink.
        """
        ticks = 0
        while not stop.is_set():
            reading = self.generate_reading()
            self._sink(reading)
            ticks += 1
            logger.debug(
                "Produced reading",
                extra={
                    "reading_value": reading.value,
                    "reading_timestamp": reading.timestamp,
                },
            )
            if await self._wait(stop, self.interval_seconds):
                break
        return ticks


async def wait_for_stop(stop: asyncio.Event, seconds: float) -> bool:
    """Sleep ``seconds``; returns True if ``stop`` fired during the wait."""
    try:
        await asyncio.wait_for(stop.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        return False
    return True
