from __future__ import annotations

from ocsp_loadgen.config.models import RunConfig

__all__ = ["RunConfig"]
