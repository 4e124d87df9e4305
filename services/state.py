"""Replay-latest broadcast of the window, its aggregates and the run state."""

from __future__ import annotations

import asyncio
import logging
from threading import RLock
from typing import AsyncIterator, Callable, Dict, Optional

from models.records import RunState, SensorSnapshot, TemperatureReading, Window
from services.aggregator import Aggregator
from services.window import BoundedWindow

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[SensorSnapshot], None]


class Subscription:
    """Handle returned by :meth:`ObservableState.subscribe`."""

    def __init__(self, state: "ObservableState", subscription_id: int) -> None:
        self._state = state
        self.subscription_id = subscription_id
        self.active = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self._state._remove(self.subscription_id)


class ObservableState:
    """Single authoritative slot plus synchronous subscriber callbacks.

    Every mutation goes through one path: update the window or run state,
    recompute aggregates from the post-mutation window, bump the sequence and
    publish. Subscribers therefore never see readings and aggregates that
    disagree.
    """

    def __init__(
        self,
        window: BoundedWindow,
        aggregator: Optional[Aggregator] = None,
    ) -> None:
        self.window = window
        self.aggregator = aggregator or Aggregator()
        self._lock = RLock()
        self._subscribers: Dict[int, SnapshotCallback] = {}
        self._next_id = 0
        self._snapshot = SensorSnapshot(
            readings=window.snapshot(),
            aggregates=self.aggregator.aggregate(window.snapshot()),
        )

    @property
    def snapshot(self) -> SensorSnapshot:
        with self._lock:
            return self._snapshot

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self, callback: SnapshotCallback) -> Subscription:
        """Register ``callback`` and immediately replay the latest snapshot to it."""
        with self._lock:
            subscription_id = self._next_id
            self._next_id += 1
            self._subscribers[subscription_id] = callback
            latest = self._snapshot
            logger.debug(
                "Subscriber added",
                extra={"subscriber_count": len(self._subscribers)},
            )
            self._deliver(subscription_id, callback, latest)
        return Subscription(self, subscription_id)

    def push_reading(self, reading: TemperatureReading) -> SensorSnapshot:
        with self._lock:
            readings = self.window.push(reading)
            return self._publish(readings=readings, run_state=self._snapshot.run_state)

    def set_run_state(self, run_state: RunState) -> SensorSnapshot:
        with self._lock:
            if run_state == self._snapshot.run_state:
                return self._snapshot
            return self._publish(readings=self._snapshot.readings, run_state=run_state)

    def reset(self) -> SensorSnapshot:
        """Drop every reading in the window while keeping the run state."""
        with self._lock:
            self.window.clear()
            return self._publish(
                readings=self.window.snapshot(), run_state=self._snapshot.run_state
            )

    async def updates(self) -> AsyncIterator[SensorSnapshot]:
        """Yield the latest snapshot, then each newer one.

        A consumer slower than the producer skips intermediate snapshots; it
        always resumes with the most recent one. Must be iterated on the event
        loop that drives the producer.
        """
        ready = asyncio.Event()
        pending: list[SensorSnapshot] = []

        def _store(snapshot: SensorSnapshot) -> None:
            pending[:] = [snapshot]
            ready.set()

        subscription = self.subscribe(_store)
        try:
            while True:
                await ready.wait()
                ready.clear()
                snapshot = pending.pop()
                yield snapshot
        finally:
            subscription.unsubscribe()

    def _publish(self, readings: Window, run_state: Optional[RunState]) -> SensorSnapshot:
        snapshot = SensorSnapshot(
            readings=readings,
            aggregates=self.aggregator.aggregate(readings),
            run_state=run_state,
            sequence=self._snapshot.sequence + 1,
        )
        self._snapshot = snapshot
        for subscription_id, callback in list(self._subscribers.items()):
            self._deliver(subscription_id, callback, snapshot)
        return snapshot

    def _deliver(
        self, subscription_id: int, callback: SnapshotCallback, snapshot: SensorSnapshot
    ) -> None:
        # a subscriber removed by an earlier callback in this round is skipped
        if subscription_id not in self._subscribers:
            return
        try:
            callback(snapshot)
        except Exception:
            logger.exception(
                "Subscriber callback failed",
                extra={"sequence": snapshot.sequence},
            )

    def _remove(self, subscription_id: int) -> None:
        with self._lock:
            self._subscribers.pop(subscription_id, None)
            logger.debug(
                "Subscriber removed",
                extra={"subscriber_count": len(self._subscribers)},
            )
