"""Composition root for the sensor window core."""

from __future__ import annotations

import logging
import random
from datetime import datetime
from functools import lru_cache
from types import TracebackType
from typing import AsyncIterator, Callable, Optional, Type

from models.records import RunState, SensorSnapshot
from services.aggregator import Aggregator
from services.controller import RunController
from services.simulator import Simulator
from services.state import ObservableState, SnapshotCallback, Subscription
from services.window import BoundedWindow
from settings import get_settings

logger = logging.getLogger(__name__)


class SensorMonitor:
    """Wires window, state, simulator and controller behind one lifecycle.

    The run state stays undecided until :meth:`start` is awaited, which begins
    producing immediately. :meth:`stop` pauses and waits for the producer to
    wind down. Both need a running event loop.
    """

    def __init__(
        self,
        capacity: int = 20,
        interval_ms: int = 2000,
        value_min: float = 65.0,
        value_max: float = 85.0,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = datetime.now,
        aggregator: Optional[Aggregator] = None,
    ) -> None:
        self.window = BoundedWindow(capacity)
        self.state = ObservableState(self.window, aggregator=aggregator)
        self.simulator = Simulator(
            sink=self.state.push_reading,
            interval_ms=interval_ms,
            value_min=value_min,
            value_max=value_max,
            rng=rng,
            clock=clock,
        )
        self.controller = RunController(self.simulator, self.state)

    async def start(self) -> None:
        logger.info(
            "Starting sensor monitor",
            extra={
                "capacity": self.window.capacity,
                "interval_ms": self.simulator.interval_ms,
            },
        )
        self.controller.start()

    async def stop(self) -> None:
        await self.controller.stop()
        logger.info(
            "Sensor monitor stopped",
            extra={"window_size": len(self.window)},
        )

    async def __aenter__(self) -> "SensorMonitor":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.stop()

    @property
    def snapshot(self) -> SensorSnapshot:
        return self.state.snapshot

    @property
    def run_state(self) -> Optional[RunState]:
        return self.controller.run_state

    def toggle(self) -> RunState:
        return self.controller.toggle()

    def pause(self) -> RunState:
        return self.controller.pause()

    def resume(self) -> RunState:
        return self.controller.resume()

    def set_run_state(self, run_state: RunState) -> RunState:
        if run_state is RunState.running:
            return self.resume()
        return self.pause()

    def subscribe(self, callback: SnapshotCallback) -> Subscription:
        return self.state.subscribe(callback)

    def updates(self) -> AsyncIterator[SensorSnapshot]:
        return self.state.updates()


@lru_cache
def build_default_monitor() -> SensorMonitor:
    """Factory that wires a monitor from environment settings."""
    settings = get_settings()
    return SensorMonitor(
        capacity=settings.window_capacity,
        interval_ms=settings.tick_interval_ms,
        value_min=settings.value_min,
        value_max=settings.value_max,
    )
