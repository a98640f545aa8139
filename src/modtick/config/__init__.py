from __future__ import annotations

from modtick.config.models import (
    CircuitBreakerConfig,
    EndPolicy,
    PlanConfig,
    RateUnit,
    RetryConfig,
    RunConfig,
    SegmentConfig,
    TargetConfig,
)
from modtick.config.parsing import parse_rate, parse_segment

__all__ = [
    "CircuitBreakerConfig",
    "EndPolicy",
    "PlanConfig",
    "RateUnit",
    "RetryConfig",
    "RunConfig",
    "SegmentConfig",
    "TargetConfig",
    "parse_rate",
    "parse_segment",
]
