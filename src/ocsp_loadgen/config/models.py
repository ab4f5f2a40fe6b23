from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Mapping
from urllib.parse import urlsplit

from ocsp_loadgen.errors import ConfigError
from ocsp_loadgen.metrics.models import Method


@dataclass(frozen=True, slots=True)
class RunConfig:
    ocsp_base: str
    get_rate: float = 0.0
    post_rate: float = 0.0
    duration_sec: float = 60.0
    timeout_sec: float | None = None
    seed: int | None = None
    run_id: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    notes: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.ocsp_base, str):
            msg = f"OCSP base must be a string, got {self.ocsp_base!r}"
            raise ConfigError(msg)
        parts = urlsplit(self.ocsp_base)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            msg = f"OCSP base must be an http(s) URL, got {self.ocsp_base!r}"
            raise ConfigError(msg)
        if not self.ocsp_base.endswith("/"):
            object.__setattr__(self, "ocsp_base", self.ocsp_base + "/")
        for name in ("get_rate", "post_rate", "duration_sec", "timeout_sec"):
            value = getattr(self, name)
            if value is None and name == "timeout_sec":
                continue
            try:
                object.__setattr__(self, name, float(value))
            except (TypeError, ValueError) as exc:
                msg = f"{name} must be a number, got {value!r}"
                raise ConfigError(msg) from exc
        for name in ("get_rate", "post_rate"):
            if not math.isfinite(getattr(self, name)):
                msg = f"{name} must be a finite number"
                raise ConfigError(msg)
        if not math.isfinite(self.duration_sec) or self.duration_sec < 0:
            msg = f"duration_sec must be >= 0, got {self.duration_sec}"
            raise ConfigError(msg)
        if self.timeout_sec is not None and self.timeout_sec <= 0:
            msg = f"timeout_sec must be positive, got {self.timeout_sec}"
            raise ConfigError(msg)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> RunConfig:
        known = {f.name for f in fields(cls)} - {"created_at"}
        unknown = sorted(set(values) - known)
        if unknown:
            msg = f"Unknown config keys: {', '.join(unknown)}"
            raise ConfigError(msg)
        if "ocsp_base" not in values:
            raise ConfigError("ocsp_base is required")
        return cls(**values)

    def rate_for(self, method: Method) -> float:
        if method is Method.GET:
            return self.get_rate
        return self.post_rate

    def to_metadata(self) -> Mapping[str, Any]:
        return {
            "run_id": self.run_id or "",
            "created_at": self.created_at.isoformat(),
            "ocsp_base": self.ocsp_base,
            "get_rate": self.get_rate,
            "post_rate": self.post_rate,
            "duration_sec": self.duration_sec,
            "timeout_sec": self.timeout_sec,
            "seed": self.seed,
            "notes": self.notes,
        }
