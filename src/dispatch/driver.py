from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Awaitable, Callable, List, Optional

from .dispatcher import Dispatcher
from .events import ArrivalEvent

logger = logging.getLogger(__name__)

TickCallback = Callable[[List[ArrivalEvent]], Awaitable[None]]


class TickDriver:
    """Background task that fires the dispatcher's tick on a fixed interval."""

    def __init__(
        self,
        dispatcher: Dispatcher,
        tick_interval: float = 2.0,
        after_tick: Optional[TickCallback] = None,
    ) -> None:
        if tick_interval <= 0:
            raise ValueError("Tick interval must be positive")
        self.dispatcher = dispatcher
        self.tick_interval = tick_interval
        self.after_tick = after_tick
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self._task is None:
            logger.info("Starting tick loop every %.2fs", self.tick_interval)
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
            logger.info("Tick loop stopped after %s ticks", self.dispatcher.tick_count)

    async def run_ticks(self, count: int) -> List[ArrivalEvent]:
        """Run ``count`` ticks back to back without waiting between them."""
        arrivals: List[ArrivalEvent] = []
        for _ in range(count):
            arrivals.extend(await self._tick_once())
        return arrivals

    async def _run(self) -> None:
        while True:
            await self._tick_once()
            await asyncio.sleep(self.tick_interval)

    async def _tick_once(self) -> List[ArrivalEvent]:
        events = await self.dispatcher.tick()
        if self.after_tick is not None:
            await self.after_tick(events)
        return events
