from __future__ import annotations

from modtick.stream.clock import Clock, MonotonicClock, VirtualClock
from modtick.stream.generator import StreamState, TickGenerator, collect_ticks

__all__ = [
    "Clock",
    "MonotonicClock",
    "StreamState",
    "TickGenerator",
    "VirtualClock",
    "collect_ticks",
]
