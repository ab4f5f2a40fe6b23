from __future__ import annotations

from pathlib import Path

from ocsp_loadgen.storage.base import LatencyRecorder
from ocsp_loadgen.storage.duckdb_store import LatencyStore

DEFAULT_DB_PATH = Path(".ocsp-loadgen/latency.duckdb")


def default_store(run_id: str) -> LatencyStore:
    return LatencyStore(DEFAULT_DB_PATH, run_id)


__all__ = ["DEFAULT_DB_PATH", "LatencyRecorder", "LatencyStore", "default_store"]
