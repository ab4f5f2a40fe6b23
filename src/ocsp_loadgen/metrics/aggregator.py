from __future__ import annotations

from collections import Counter, defaultdict
from typing import Iterable

import numpy as np

from ocsp_loadgen.metrics.models import LatencySample, Method, MethodSummary, Outcome


def summarize(samples: Iterable[LatencySample]) -> list[MethodSummary]:
    buckets: dict[Method, list[LatencySample]] = defaultdict(list)
    for sample in samples:
        buckets[sample.method].append(sample)

    summaries: list[MethodSummary] = []
    for method in Method:
        bucket = buckets.get(method)
        if not bucket:
            continue
        latencies = np.array([s.latency_ms for s in bucket])
        p50, p95, p99 = (float(v) for v in np.percentile(latencies, [50, 95, 99]))
        outcomes = Counter(s.outcome for s in bucket)
        span = max(s.started for s in bucket) - min(s.started for s in bucket)
        # n samples span n - 1 intervals; a single sample has no rate
        achieved = (len(bucket) - 1) / span if span > 0 else 0.0
        summaries.append(
            MethodSummary(
                method=method,
                count=len(bucket),
                outcomes={o: outcomes[o] for o in Outcome if outcomes[o]},
                p50_ms=p50,
                p95_ms=p95,
                p99_ms=p99,
                achieved_rps=achieved,
            )
        )
    return summaries


def format_summary(summaries: Iterable[MethodSummary]) -> str:
    lines = []
    for s in summaries:
        counts = ", ".join(f"{o.value}={n}" for o, n in s.outcomes.items())
        lines.append(
            f"{s.method.value:<4} n={s.count} rps={s.achieved_rps:.1f} "
            f"p50={s.p50_ms:.1f}ms p95={s.p95_ms:.1f}ms p99={s.p99_ms:.1f}ms [{counts}]"
        )
    return "\n".join(lines) if lines else "no samples recorded"
