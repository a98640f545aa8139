from __future__ import annotations

from collections import Counter, defaultdict
from typing import Iterable

import numpy as np

from modtick.metrics.models import ErrorType, PerSecondMetrics, RequestEvent


def aggregate_per_second(
    run_id: str,
    events: Iterable[RequestEvent],
    requested_rates: list[float],
    tick_offsets: Iterable[float] = (),
) -> list[PerSecondMetrics]:
    last = len(requested_rates) - 1
    buckets: dict[int, list[RequestEvent]] = defaultdict(list)
    for event in events:
        buckets[_second_of(event.tick_offset_sec, last)].append(event)
    scheduled = Counter(_second_of(offset, last) for offset in tick_offsets)

    metrics: list[PerSecondMetrics] = []
    for second, requested in enumerate(requested_rates):
        bucket = buckets.get(second, [])
        completed = [e for e in bucket if e.error_type is not ErrorType.REJECTED]
        latencies = [e.latency_ms for e in completed if e.latency_ms >= 0]
        achieved = sum(1 for e in completed if e.error_type is None)
        error_count = sum(1 for e in bucket if e.error_type is not None)
        timeout_count = sum(1 for e in bucket if e.error_type is ErrorType.TIMEOUT)
        if latencies:
            p50, p95, p99 = (float(v) for v in np.percentile(latencies, [50, 95, 99]))
        else:
            p50 = p95 = p99 = 0.0
        total = max(1, len(bucket))
        metrics.append(
            PerSecondMetrics(
                run_id=run_id,
                second=second,
                requested_rps=requested,
                scheduled_ticks=scheduled.get(second, 0),
                achieved_rps=float(achieved),
                p50_ms=p50,
                p95_ms=p95,
                p99_ms=p99,
                error_rate=error_count / total,
                timeout_rate=timeout_count / total,
            )
        )
    return metrics


def _second_of(offset_sec: float, last: int) -> int:
    # a tick landing exactly on the plan end counts toward its final second
    return max(0, min(last, int(offset_sec)))
