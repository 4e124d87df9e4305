from __future__ import annotations

import asyncio
from typing import List

import pytest


class ManualTicker:
    """Wait strategy whose intervals only elapse when the test calls :meth:`advance`."""

    def __init__(self) -> None:
        self._waiters: List[asyncio.Future[None]] = []

    @property
    def waiting(self) -> int:
        return len(self._waiters)

    async def wait(self, stop: asyncio.Event, _seconds: float) -> bool:
        tick = asyncio.get_running_loop().create_future()
        self._waiters.append(tick)
        stopped = asyncio.ensure_future(stop.wait())
        try:
            await asyncio.wait({tick, stopped}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stopped.cancel()
            if tick in self._waiters:
                self._waiters.remove(tick)
        return stop.is_set()

    @staticmethod
    async def settle() -> None:
        """Give every ready task a chance to run to its next wait."""
        for _ in range(10):
            await asyncio.sleep(0)

    async def advance(self, ticks: int = 1) -> None:
        """Elapse ``ticks`` intervals for every waiting producer."""
        for _ in range(ticks):
            await self.settle()
            waiters, self._waiters = self._waiters, []
            for tick in waiters:
                if not tick.done():
                    tick.set_result(None)
            await self.settle()


@pytest.fixture
def ticker() -> ManualTicker:
    return ManualTicker()
