from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Method(str, Enum):
    GET = "GET"
    POST = "POST"


class Outcome(str, Enum):
    GOOD = "good"
    ERROR = "error"
    UNEXPECTED_STATUS = "unexpected status"
    READ_ERROR = "read error"


@dataclass(frozen=True, slots=True)
class LatencySample:
    method: Method
    started: float
    finished: float
    outcome: Outcome

    @property
    def latency_ms(self) -> float:
        return (self.finished - self.started) * 1000.0


@dataclass(frozen=True, slots=True)
class MethodSummary:
    method: Method
    count: int
    outcomes: dict[Outcome, int]
    p50_ms: float
    p95_ms: float
    p99_ms: float
    achieved_rps: float

    @property
    def good(self) -> int:
        return self.outcomes.get(Outcome.GOOD, 0)
