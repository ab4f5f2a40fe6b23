from __future__ import annotations

from typing import Protocol

from ocsp_loadgen.metrics import LatencySample


class LatencyRecorder(Protocol):
    """Append-only sink; ``add`` may be called from many senders at once."""

    def add(self, sample: LatencySample) -> None:
        ...
