from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Callable

from ocsp_loadgen.metrics import Method

Dispatch = Callable[[Method], None]


@dataclass(slots=True)
class RateScheduler:
    """Fires ``dispatch`` at a steady ``rate`` per second until stopped.

    ``dispatch`` must not block: it is expected to spawn the send and return.
    The rate is captured once when ``run`` starts.
    """

    method: Method
    rate: float
    dispatch: Dispatch
    ticks: int = field(default=0, init=False)

    async def run(self, stop: asyncio.Event) -> None:
        rate = self.rate
        if rate <= 0:
            return
        interval = 1.0 / rate
        next_tick = time.perf_counter() + interval
        while not stop.is_set():
            if await _stopped_before(stop, next_tick):
                return
            self.ticks += 1
            self.dispatch(self.method)
            next_tick += interval


async def _stopped_before(stop: asyncio.Event, deadline: float) -> bool:
    """Wait until ``deadline`` or ``stop``; True if stop won the race."""
    delay = max(0.0, deadline - time.perf_counter())
    try:
        await asyncio.wait_for(stop.wait(), timeout=delay)
    except asyncio.TimeoutError:
        return stop.is_set()
    return True
