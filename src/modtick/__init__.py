from __future__ import annotations

import logging

from modtick.config import EndPolicy
from modtick.errors import ConfigError, ModTickError, PlanConsumedError
from modtick.rate import IntervalPlan, LinearSegment, Rate
from modtick.stream import (
    Clock,
    MonotonicClock,
    StreamState,
    TickGenerator,
    VirtualClock,
    collect_ticks,
)

logging.getLogger("modtick").addHandler(logging.NullHandler())

__all__ = [
    "Clock",
    "ConfigError",
    "EndPolicy",
    "IntervalPlan",
    "LinearSegment",
    "ModTickError",
    "MonotonicClock",
    "PlanConsumedError",
    "Rate",
    "StreamState",
    "TickGenerator",
    "VirtualClock",
    "collect_ticks",
]
