from __future__ import annotations

from modtick.config.models import RateUnit, SegmentConfig
from modtick.errors import ConfigError


def parse_rate(text: str) -> int:
    """Parse ``"120"``, ``"120/m"`` or ``"2/s"`` into a per-minute count."""
    value, sep, unit = text.strip().partition("/")
    try:
        count = int(value)
    except ValueError:
        msg = f"Invalid rate {text!r}: expected an integer count"
        raise ConfigError(msg) from None
    if count < 0:
        msg = f"Invalid rate {text!r}: count must be non-negative"
        raise ConfigError(msg)
    if not sep:
        return count
    try:
        rate_unit = RateUnit(unit.strip().lower())
    except ValueError:
        msg = f"Invalid rate {text!r}: unit must be 'm' or 's'"
        raise ConfigError(msg) from None
    if rate_unit is RateUnit.PER_SECOND:
        return count * 60
    return count


def parse_segment(text: str) -> SegmentConfig:
    """Parse ``START:DURATION:END``, e.g. ``"10/s:30:100/s"``."""
    parts = text.split(":")
    if len(parts) != 3:
        msg = f"Invalid segment {text!r}: expected START:DURATION:END"
        raise ConfigError(msg)
    start, duration, end = parts
    try:
        duration_sec = float(duration)
    except ValueError:
        msg = f"Invalid segment {text!r}: duration must be a number of seconds"
        raise ConfigError(msg) from None
    if duration_sec <= 0:
        msg = f"Invalid segment {text!r}: duration must be positive"
        raise ConfigError(msg)
    return SegmentConfig(
        start_per_minute=parse_rate(start),
        duration_sec=duration_sec,
        end_per_minute=parse_rate(end),
    )
