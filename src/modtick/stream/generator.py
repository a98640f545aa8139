from __future__ import annotations

from collections import deque
from enum import Enum
import logging
import math
from typing import TYPE_CHECKING

from modtick.config import EndPolicy
from modtick.stream.clock import Clock

if TYPE_CHECKING:
    from modtick.rate.models import LinearSegment

logger = logging.getLogger(__name__)

_END_TOLERANCE_SEC = 1e-9


class StreamState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    EXHAUSTED = "exhausted"


class TickGenerator:
    """Asynchronous stream of timestamps spaced by a piecewise-linear rate.

    Each pull reads the clock, works out how far into the active segment the
    stream is, converts that segment's rate at that point into a wait, sleeps
    for it and returns the planned instant ``now + wait``. The stream is
    exhausted once the last segment's span has passed and stays exhausted.

    Build one with :meth:`IntervalPlan.into_stream`; drive it with
    ``await stream.pull()`` or ``async for tick in stream``.
    """

    def __init__(
        self,
        segments: deque[LinearSegment],
        total_duration_sec: float,
        clock: Clock,
        end_policy: EndPolicy = EndPolicy.CLIP,
    ) -> None:
        self._segments = segments
        self._total_duration_sec = total_duration_sec
        self._clock = clock
        self._end_policy = end_policy
        self._state = StreamState.IDLE
        self._segment: LinearSegment | None = None
        self._segment_start = 0.0
        self._offset = 0.0
        self._plan_end = math.inf
        self._emitted = 0

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def total_duration_sec(self) -> float:
        return self._total_duration_sec

    @property
    def emitted(self) -> int:
        return self._emitted

    @property
    def active_segment(self) -> LinearSegment | None:
        return self._segment

    @property
    def carried_offset_sec(self) -> float:
        return self._offset

    def __aiter__(self) -> TickGenerator:
        return self

    async def __anext__(self) -> float:
        tick = await self.pull()
        if tick is None:
            raise StopAsyncIteration
        return tick

    async def pull(self) -> float | None:
        """Wait for and return the next tick, or ``None`` once exhausted."""
        if self._state is StreamState.EXHAUSTED:
            return None
        now = self._clock.now()
        segment = self._segment
        if segment is None:
            if not self._segments:
                self._exhaust("no segments")
                return None
            segment = self._segments.popleft()
            self._activate(segment, now)
            self._segment_start = now
            self._offset = 0.0
            self._plan_end = now + self._total_duration_sec

        x = now - self._segment_start - self._offset
        while x > segment.duration_sec:
            if not self._segments:
                self._exhaust("last segment elapsed")
                return None
            x -= segment.duration_sec
            self._offset += segment.duration_sec
            segment = self._segments.popleft()
            self._activate(segment, now)

        wait = _interval_for(segment.rate_at(x))
        if self._end_policy is EndPolicy.CLIP:
            remaining = self._plan_end - now
            # now is a running sum of waits, so the tick due on plan_end may drift past it
            if wait > remaining + _END_TOLERANCE_SEC:
                if remaining > 0:
                    await self._clock.sleep(remaining)
                self._exhaust("next tick falls past plan end")
                return None
        elif math.isinf(wait):
            logger.warning(
                "Rate %.6g/s at %.3fs into segment yields no next tick; ending stream",
                segment.rate_at(x),
                x,
            )
            self._exhaust("unusable rate")
            return None

        await self._clock.sleep(wait)
        self._emitted += 1
        return now + wait

    def _activate(self, segment: LinearSegment, now: float) -> None:
        self._segment = segment
        self._state = StreamState.ACTIVE
        logger.debug(
            "Segment active at %.6f: %.3fs, %.4g -> %.4g events/s (%d queued)",
            now,
            segment.duration_sec,
            segment.start_rate(),
            segment.end_rate(),
            len(self._segments),
        )

    def _exhaust(self, reason: str) -> None:
        self._state = StreamState.EXHAUSTED
        self._segment = None
        logger.debug("Tick stream exhausted after %d tick(s): %s", self._emitted, reason)


def _interval_for(rate: float) -> float:
    if not rate > 0 or not math.isfinite(rate):
        return math.inf
    return 1.0 / rate


async def collect_ticks(stream: TickGenerator, limit: int | None = None) -> list[float]:
    ticks: list[float] = []
    while limit is None or len(ticks) < limit:
        tick = await stream.pull()
        if tick is None:
            break
        ticks.append(tick)
    return ticks
