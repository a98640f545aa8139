from __future__ import annotations

import pytest

from modtick.metrics import ErrorType, RequestEvent, aggregate_per_second


def _event(offset: float, latency_ms: float, error: ErrorType | None = None) -> RequestEvent:
    return RequestEvent(
        run_id="r",
        tick_offset_sec=offset,
        wall_time=0.0,
        latency_ms=latency_ms,
        status_code=None if error else 200,
        error_type=error,
        attempts=1,
        bytes_sent=0,
        bytes_received=10,
    )


def test_buckets_by_tick_offset() -> None:
    events = [
        _event(0.2, 10.0),
        _event(0.7, 30.0),
        _event(1.1, 20.0, ErrorType.TIMEOUT),
        _event(2.0, 5.0),
    ]
    metrics = aggregate_per_second("r", events, [2.0, 1.0], [0.2, 0.7, 1.1, 2.0])
    assert [m.second for m in metrics] == [0, 1]
    first, last = metrics
    assert first.achieved_rps == 2.0
    assert first.scheduled_ticks == 2
    assert first.p50_ms == pytest.approx(20.0)
    assert first.error_rate == 0.0
    # the tick at exactly 2.0s lands in the final second
    assert last.scheduled_ticks == 2
    assert last.achieved_rps == 1.0
    assert last.timeout_rate == pytest.approx(0.5)


def test_rejected_requests_do_not_count_latency() -> None:
    events = [_event(0.5, -1.0, ErrorType.REJECTED), _event(0.6, 8.0)]
    (metrics,) = aggregate_per_second("r", events, [2.0])
    assert metrics.achieved_rps == 1.0
    assert metrics.p99_ms == pytest.approx(8.0)
    assert metrics.error_rate == pytest.approx(0.5)


def test_empty_seconds_report_zero() -> None:
    metrics = aggregate_per_second("r", [], [1.0, 1.0, 1.0])
    assert [m.achieved_rps for m in metrics] == [0.0, 0.0, 0.0]
    assert all(m.p95_ms == 0.0 for m in metrics)
