from __future__ import annotations

from modtick.rate.models import LinearSegment, Rate
from modtick.rate.plan import IntervalPlan

__all__ = ["IntervalPlan", "LinearSegment", "Rate"]
