from __future__ import annotations

from dataclasses import dataclass
import math

from modtick.errors import ConfigError


@dataclass(frozen=True, slots=True)
class Rate:
    """Events per unit time, stored as a whole count per minute."""

    per_minute: int

    def __post_init__(self) -> None:
        if self.per_minute < 0:
            msg = f"rate must be non-negative, got {self.per_minute}/min"
            raise ConfigError(msg)

    @classmethod
    def from_per_minute(cls, count: int) -> Rate:
        return cls(count)

    @classmethod
    def from_per_second(cls, count: int) -> Rate:
        return cls(count * 60)

    def as_per_second(self) -> float:
        return self.per_minute / 60.0


@dataclass(frozen=True, slots=True)
class LinearSegment:
    """Target rate that moves linearly from a start rate to an end rate.

    ``rate_at(t)`` is ``slope * t + intercept`` for ``t`` seconds into the
    segment. When either endpoint is zero the inter-event interval ``1 / rate``
    blows up at that end, so the segment also carries ``floor_rate``: the rate
    whose interval equals the time it takes a zero-start ramp to accumulate
    one event, ``sqrt(2 / |slope|)``. Evaluations never drop below it.
    """

    duration_sec: float
    slope: float
    intercept: float
    floor_rate: float | None = None

    @classmethod
    def from_rates(cls, start: Rate, duration_sec: float, end: Rate) -> LinearSegment:
        if not duration_sec > 0 or not math.isfinite(duration_sec):
            msg = f"segment duration must be positive, got {duration_sec}"
            raise ConfigError(msg)
        start_rps = start.as_per_second()
        end_rps = end.as_per_second()
        if start_rps == 0.0 and end_rps == 0.0:
            msg = "segment start and end rates cannot both be zero"
            raise ConfigError(msg)
        slope = (end_rps - start_rps) / duration_sec
        floor_rate = None
        if start_rps == 0.0 or end_rps == 0.0:
            floor_rate = math.sqrt(abs(slope) / 2.0)
        return cls(
            duration_sec=float(duration_sec),
            slope=slope,
            intercept=start_rps,
            floor_rate=floor_rate,
        )

    def rate_at(self, t_sec: float) -> float:
        rate = self.slope * t_sec + self.intercept
        if self.floor_rate is not None:
            return max(rate, self.floor_rate)
        return rate

    def start_rate(self) -> float:
        return self.intercept

    def end_rate(self) -> float:
        return self.slope * self.duration_sec + self.intercept
