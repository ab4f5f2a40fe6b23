from __future__ import annotations

from ocsp_loadgen.loadgen.inflight import InFlight
from ocsp_loadgen.loadgen.runner import (
    RunCoordinator,
    RunPhase,
    RunReport,
    StopReason,
    StopToken,
    install_signal_handlers,
    run_load,
)
from ocsp_loadgen.loadgen.scheduler import RateScheduler
from ocsp_loadgen.loadgen.sender import Sender

__all__ = [
    "InFlight",
    "RateScheduler",
    "RunCoordinator",
    "RunPhase",
    "RunReport",
    "Sender",
    "StopReason",
    "StopToken",
    "install_signal_handlers",
    "run_load",
]
