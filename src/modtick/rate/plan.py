from __future__ import annotations

from collections import deque
import logging
import math

from modtick.config import EndPolicy, PlanConfig
from modtick.errors import PlanConsumedError
from modtick.rate.models import LinearSegment, Rate
from modtick.stream.clock import Clock, MonotonicClock
from modtick.stream.generator import TickGenerator

logger = logging.getLogger(__name__)


class IntervalPlan:
    """Ordered, append-only queue of rate segments.

    Segments play back in the order they were appended. The plan is handed
    over to a :class:`TickGenerator` by :meth:`into_stream` and cannot be used
    afterwards.
    """

    __slots__ = ("_segments", "_total_duration_sec", "_consumed")

    def __init__(self) -> None:
        self._segments: deque[LinearSegment] = deque()
        self._total_duration_sec = 0.0
        self._consumed = False

    @classmethod
    def from_config(cls, config: PlanConfig) -> IntervalPlan:
        plan = cls()
        for segment in config.segments:
            plan.append_segment(
                Rate.from_per_minute(segment.start_per_minute),
                segment.duration_sec,
                Rate.from_per_minute(segment.end_per_minute),
            )
        return plan

    @property
    def total_duration_sec(self) -> float:
        return self._total_duration_sec

    def __len__(self) -> int:
        return len(self._segments)

    def segments(self) -> list[LinearSegment]:
        self._check_not_consumed()
        return list(self._segments)

    def append_segment(self, start: Rate, duration_sec: float, end: Rate) -> None:
        self._check_not_consumed()
        segment = LinearSegment.from_rates(start, duration_sec, end)
        self._segments.append(segment)
        self._total_duration_sec += segment.duration_sec

    def rate_at(self, t_sec: float) -> float:
        """Target events/sec at ``t_sec`` seconds after the plan starts."""
        self._check_not_consumed()
        if t_sec < 0:
            return 0.0
        offset = 0.0
        for segment in self._segments:
            if t_sec <= offset + segment.duration_sec:
                return segment.rate_at(t_sec - offset)
            offset += segment.duration_sec
        return 0.0

    def rates_per_second(self) -> list[float]:
        """Sample the rate curve at the start of every whole second."""
        seconds = math.ceil(self._total_duration_sec)
        return [self.rate_at(float(t)) for t in range(seconds)]

    def into_stream(
        self,
        clock: Clock | None = None,
        end_policy: EndPolicy = EndPolicy.CLIP,
    ) -> TickGenerator:
        self._check_not_consumed()
        self._consumed = True
        segments, self._segments = self._segments, deque()
        total, self._total_duration_sec = self._total_duration_sec, 0.0
        logger.debug(
            "Plan converted to stream: %d segment(s), %.3fs total, end policy %s",
            len(segments),
            total,
            end_policy.value,
        )
        return TickGenerator(
            segments,
            total,
            clock=clock if clock is not None else MonotonicClock(),
            end_policy=end_policy,
        )

    def _check_not_consumed(self) -> None:
        if self._consumed:
            msg = "IntervalPlan has already been converted into a stream"
            raise PlanConsumedError(msg)
