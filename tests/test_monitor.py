"""End-to-end tests of the composed monitor lifecycle."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import List

from models.records import RunState, SensorSnapshot
from services.monitor import SensorMonitor


def test_run_state_is_undecided_until_started() -> None:
    monitor = SensorMonitor()

    assert monitor.run_state is None
    assert monitor.snapshot.readings == ()


def test_start_produces_immediately_and_stop_halts() -> None:
    async def scenario() -> None:
        monitor = SensorMonitor(interval_ms=60_000, rng=random.Random(7))
        await monitor.start()
        await asyncio.sleep(0.02)

        snapshot = monitor.snapshot
        assert snapshot.run_state is RunState.running
        assert len(snapshot.readings) == 1
        assert 65.0 <= snapshot.current_value < 85.0

        await monitor.stop()
        assert monitor.run_state is RunState.paused

    asyncio.run(scenario())


def test_window_stays_bounded_while_running() -> None:
    async def scenario() -> SensorSnapshot:
        async with SensorMonitor(capacity=4, interval_ms=5) as monitor:
            await asyncio.sleep(0.3)
        return monitor.snapshot

    snapshot = asyncio.run(scenario())

    assert len(snapshot.readings) == 4
    values = [reading.value for reading in snapshot.readings]
    assert snapshot.current_value == values[0]
    assert snapshot.min_value <= snapshot.average_value <= snapshot.max_value


def test_subscribers_observe_every_tick_in_order() -> None:
    received: List[SensorSnapshot] = []

    async def scenario() -> None:
        monitor = SensorMonitor(interval_ms=10)
        subscription = monitor.subscribe(received.append)
        await monitor.start()
        await asyncio.sleep(0.08)
        subscription.unsubscribe()
        await monitor.stop()

    asyncio.run(scenario())

    sequences = [snapshot.sequence for snapshot in received]
    assert sequences == list(range(len(sequences)))
    ticks = [snapshot for snapshot in received if snapshot.readings]
    for previous, following in zip(ticks, ticks[1:]):
        assert following.readings[1:] == previous.readings[: len(following.readings) - 1]


def test_toggle_and_set_run_state() -> None:
    async def scenario() -> None:
        monitor = SensorMonitor(interval_ms=60_000)
        await monitor.start()

        assert monitor.toggle() is RunState.paused
        assert monitor.set_run_state(RunState.paused) is RunState.paused
        assert monitor.set_run_state(RunState.running) is RunState.running
        assert monitor.controller.active_producers == 1

        await monitor.stop()

    asyncio.run(scenario())


def test_lifecycle_is_logged(caplog) -> None:
    async def scenario() -> None:
        async with SensorMonitor(capacity=5, interval_ms=60_000):
            await asyncio.sleep(0)

    with caplog.at_level(logging.INFO):
        asyncio.run(scenario())

    records = [record for record in caplog.records if record.name == "services.monitor"]
    assert any(getattr(record, "capacity", None) == 5 for record in records)
    assert any("stopped" in record.getMessage() for record in records)
