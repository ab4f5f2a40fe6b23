from __future__ import annotations

import asyncio
import logging
import random
import signal
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

import httpx

from ocsp_loadgen.config import RunConfig
from ocsp_loadgen.loadgen.inflight import InFlight
from ocsp_loadgen.loadgen.scheduler import RateScheduler
from ocsp_loadgen.loadgen.sender import Sender
from ocsp_loadgen.metrics import Method
from ocsp_loadgen.ocsp import RequestPool
from ocsp_loadgen.storage import LatencyRecorder

logger = logging.getLogger(__name__)

STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class RunPhase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOP_REQUESTED = "stop_requested"
    DRAINED = "drained"


class StopReason(str, Enum):
    DURATION = "duration elapsed"
    INTERRUPT = "interrupted"


class StopToken:
    """Cancellation token tripped by a signal handler or any other caller."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.signal_name: str | None = None

    def trigger(self, signal_name: str | None = None) -> None:
        if self._event.is_set():
            return
        self.signal_name = signal_name
        self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


def install_signal_handlers(
    token: StopToken,
    signals: Iterable[signal.Signals] = STOP_SIGNALS,
) -> None:
    loop = asyncio.get_running_loop()
    for sig in signals:
        try:
            loop.add_signal_handler(sig, token.trigger, sig.name)
        except NotImplementedError:
            # loops without add_signal_handler (Windows proactor)
            signal.signal(
                sig,
                lambda signum, _frame: loop.call_soon_threadsafe(
                    token.trigger, signal.Signals(signum).name
                ),
            )


@dataclass(frozen=True, slots=True)
class RunReport:
    run_id: str
    reason: StopReason
    signal_name: str | None
    ticks: dict[Method, int]
    spawned: int
    completed: int
    started: float
    finished: float


def _new_run_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True)
class RunCoordinator:
    config: RunConfig
    pool: RequestPool
    recorder: LatencyRecorder
    client: httpx.AsyncClient
    phase: RunPhase = field(default=RunPhase.IDLE, init=False)
    inflight: InFlight | None = field(default=None, init=False)

    async def run(self, stop: StopToken | None = None) -> RunReport:
        if self.phase is not RunPhase.IDLE:
            msg = f"coordinator already used (phase={self.phase.value})"
            raise RuntimeError(msg)
        token = stop or StopToken()
        inflight = InFlight()
        self.inflight = inflight
        sender = Sender(
            client=self.client,
            pool=self.pool,
            ocsp_base=self.config.ocsp_base,
            recorder=self.recorder,
            rng=random.Random(self.config.seed),
            timeout_sec=self.config.timeout_sec,
        )

        def dispatch(method: Method) -> None:
            inflight.spawn(sender.send(method))

        schedulers = [
            RateScheduler(method, self.config.rate_for(method), dispatch)
            for method in Method
            if self.config.rate_for(method) > 0
        ]
        stop_ticks = asyncio.Event()
        started = time.time()
        self.phase = RunPhase.RUNNING
        ticking = [asyncio.create_task(s.run(stop_ticks)) for s in schedulers]

        reason = await self._wait_for_stop(token)
        self.phase = RunPhase.STOP_REQUESTED
        stop_ticks.set()
        await asyncio.gather(*ticking)
        logger.info("sent stop signals, waiting")
        await inflight.wait()
        self.phase = RunPhase.DRAINED
        logger.info("all calls finished")

        ticks = {method: 0 for method in Method}
        for s in schedulers:
            ticks[s.method] = s.ticks
        return RunReport(
            run_id=self.config.run_id or _new_run_id(),
            reason=reason,
            signal_name=token.signal_name if reason is StopReason.INTERRUPT else None,
            ticks=ticks,
            spawned=inflight.spawned,
            completed=inflight.completed,
            started=started,
            finished=time.time(),
        )

    async def _wait_for_stop(self, token: StopToken) -> StopReason:
        try:
            await asyncio.wait_for(token.wait(), timeout=self.config.duration_sec)
        except asyncio.TimeoutError:
            if not token.is_set():
                logger.info("run duration elapsed")
                return StopReason.DURATION
        logger.info("signal caught [%s], ending", token.signal_name or "stop requested")
        return StopReason.INTERRUPT


async def run_load(
    config: RunConfig,
    pool: RequestPool,
    recorder: LatencyRecorder,
    stop: StopToken | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> RunReport:
    # no connection cap; outstanding sends are unbounded
    limits = httpx.Limits(max_connections=None, max_keepalive_connections=100)
    async with httpx.AsyncClient(transport=transport, limits=limits) as client:
        coordinator = RunCoordinator(config=config, pool=pool, recorder=recorder, client=client)
        return await coordinator.run(stop)
