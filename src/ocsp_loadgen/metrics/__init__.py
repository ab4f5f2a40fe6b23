from __future__ import annotations

from ocsp_loadgen.metrics.aggregator import format_summary, summarize
from ocsp_loadgen.metrics.models import LatencySample, Method, MethodSummary, Outcome

__all__ = ["LatencySample", "Method", "MethodSummary", "Outcome", "format_summary", "summarize"]
