from __future__ import annotations

import pytest

from ocsp_loadgen.metrics import LatencySample, Method, Outcome, format_summary, summarize


def test_summary_per_method() -> None:
    samples = [LatencySample(Method.GET, float(i), i + 0.010 * (i + 1), Outcome.GOOD) for i in range(10)]
    samples.append(LatencySample(Method.POST, 3.0, 3.5, Outcome.UNEXPECTED_STATUS))
    get, post = summarize(samples)
    assert get.method is Method.GET
    assert get.count == 10
    assert get.good == 10
    assert get.p50_ms == pytest.approx(55.0)
    assert get.p99_ms < 101.0
    assert get.achieved_rps == pytest.approx(1.0)
    assert post.outcomes == {Outcome.UNEXPECTED_STATUS: 1}
    assert post.good == 0
    assert "unexpected status=1" in format_summary([get, post])


def test_empty_summary() -> None:
    assert summarize([]) == []
    assert format_summary([]) == "no samples recorded"


def test_rate_counts_intervals_between_samples() -> None:
    samples = [LatencySample(Method.GET, i * 0.1, i * 0.1 + 0.01, Outcome.GOOD) for i in range(10)]
    (summary,) = summarize(samples)
    assert summary.achieved_rps == pytest.approx(10.0)
    (single,) = summarize(samples[:1])
    assert single.achieved_rps == 0.0
