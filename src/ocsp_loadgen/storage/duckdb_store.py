from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

import duckdb
import pandas as pd

from ocsp_loadgen.config import RunConfig
from ocsp_loadgen.errors import SinkError
from ocsp_loadgen.metrics import LatencySample, Method, Outcome


@dataclass(slots=True)
class LatencyStore:
    db_path: Path
    run_id: str
    _buffer: list[LatencySample] = field(default_factory=list, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _written: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._init_schema()
        except (OSError, duckdb.Error) as exc:
            msg = f"cannot open latency store {self.db_path}: {exc}"
            raise SinkError(msg) from exc

    def _connect(self) -> duckdb.DuckDBPyConnection:
        return duckdb.connect(str(self.db_path))

    def _init_schema(self) -> None:
        with self._connect() as con:
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS run_meta (
                    run_id TEXT PRIMARY KEY,
                    created_at TIMESTAMP,
                    config_json TEXT,
                    notes TEXT
                );
                """
            )
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS latency_samples (
                    run_id TEXT,
                    method TEXT,
                    started DOUBLE,
                    finished DOUBLE,
                    outcome TEXT
                );
                """
            )

    @property
    def written(self) -> int:
        return self._written

    def run_exists(self, run_id: str) -> bool:
        with self._connect() as con:
            result = con.execute(
                "SELECT COUNT(*) FROM run_meta WHERE run_id = ?",
                [run_id],
            ).fetchone()
            return bool(result and result[0] > 0)

    def start_run(self, config: RunConfig) -> None:
        if self.run_exists(self.run_id):
            msg = f"Run {self.run_id} already exists"
            raise SinkError(msg)
        config_json = json.dumps(config.to_metadata())
        with self._connect() as con:
            con.execute(
                "INSERT INTO run_meta VALUES (?, ?, ?, ?)",
                [self.run_id, config.created_at, config_json, config.notes],
            )

    @property
    def pending(self) -> int:
        return len(self._buffer)

    def add(self, sample: LatencySample) -> None:
        # memory only; samples reach duckdb in flush(), once the run has drained
        with self._lock:
            self._buffer.append(sample)

    def flush(self) -> None:
        with self._lock:
            self._flush_locked()

    def close(self) -> None:
        self.flush()

    def _flush_locked(self) -> None:
        if not self._buffer:
            return
        samples_df = pd.DataFrame(
            [
                {
                    "run_id": self.run_id,
                    "method": s.method.value,
                    "started": s.started,
                    "finished": s.finished,
                    "outcome": s.outcome.value,
                }
                for s in self._buffer
            ]
        )
        with self._connect() as con:
            con.execute("INSERT INTO latency_samples SELECT * FROM samples_df")
        self._written += len(self._buffer)
        self._buffer.clear()

    def list_runs(self) -> pd.DataFrame:
        with self._connect() as con:
            return con.execute(
                "SELECT run_id, created_at, notes FROM run_meta ORDER BY created_at DESC"
            ).fetchdf()

    def load_run_meta(self, run_id: str) -> dict[str, object] | None:
        with self._connect() as con:
            row = con.execute(
                "SELECT config_json FROM run_meta WHERE run_id = ?",
                [run_id],
            ).fetchone()
            if not row:
                return None
            return json.loads(row[0])

    def load_samples(self, run_id: str | None = None) -> pd.DataFrame:
        with self._connect() as con:
            return con.execute(
                "SELECT method, started, finished, outcome FROM latency_samples "
                "WHERE run_id = ? ORDER BY started",
                [run_id or self.run_id],
            ).fetchdf()

    def iter_samples(self, run_id: str | None = None) -> Iterator[LatencySample]:
        frame = self.load_samples(run_id)
        for row in frame.itertuples(index=False):
            yield LatencySample(
                method=Method(row.method),
                started=float(row.started),
                finished=float(row.finished),
                outcome=Outcome(row.outcome),
            )
