from __future__ import annotations

from modtick.metrics.aggregator import aggregate_per_second
from modtick.metrics.models import ErrorType, PerSecondMetrics, RequestEvent

__all__ = ["ErrorType", "PerSecondMetrics", "RequestEvent", "aggregate_per_second"]
