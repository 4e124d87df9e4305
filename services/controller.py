"""Pause/resume control over the simulator task."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Set

from models.records import RunState
from services.simulator import Simulator
from services.state import ObservableState

logger = logging.getLogger(__name__)


class RunController:
    """Owns the single producer task and the run state it implies.

    All transitions are synchronous and must be called from the event loop
    that runs the producer. Pausing sets the producer's stop event and
    cancels its task before returning, so no reading is pushed afterwards.
    """

    def __init__(self, simulator: Simulator, state: ObservableState) -> None:
        self.simulator = simulator
        self.state = state
        self._task: Optional[asyncio.Task[int]] = None
        self._stop: Optional[asyncio.Event] = None
        self._draining: Set[asyncio.Task[int]] = set()

    @property
    def run_state(self) -> Optional[RunState]:
        return self.state.snapshot.run_state

    @property
    def is_running(self) -> bool:
        return self._task is not None

    @property
    def active_producers(self) -> int:
        """Producers that may still push readings; never more than one."""
        if self._task is None or self._task.done():
            return 0
        assert self._stop is not None and not self._stop.is_set()
        return 1

    def start(self) -> RunState:
        return self.resume()

    def toggle(self) -> RunState:
        if self.is_running:
            return self.pause()
        return self.resume()

    def resume(self) -> RunState:
        if self._task is not None:
            return RunState.running

        stop = asyncio.Event()
        task = asyncio.get_running_loop().create_task(
            self.simulator.run(stop), name="sensor-simulator"
        )
        task.add_done_callback(self._on_producer_done)
        self._stop = stop
        self._task = task
        self.state.set_run_state(RunState.running)
        logger.info(
            "Simulation running",
            extra={
                "run_state": RunState.running,
                "interval_ms": self.simulator.interval_ms,
            },
        )
        return RunState.running

    def pause(self) -> RunState:
        task, stop = self._task, self._stop
        self._task = None
        self._stop = None
        if task is not None and stop is not None:
            stop.set()
            task.cancel()
            self._draining.add(task)
            task.add_done_callback(self._draining.discard)
        self.state.set_run_state(RunState.paused)
        logger.info("Simulation paused", extra={"run_state": RunState.paused})
        return RunState.paused

    async def stop(self) -> None:
        """Pause and wait until every cancelled producer has finished."""
        if self._task is not None:
            self.pause()
        if self._draining:
            await asyncio.gather(*self._draining, return_exceptions=True)

    def _on_producer_done(self, task: asyncio.Task[int]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Simulator task failed",
                exc_info=exc,
                extra={"run_state": self.run_state},
            )
        if task is self._task:
            self.pause()
