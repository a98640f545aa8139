from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping


class EndPolicy(str, Enum):
    CLIP = "clip"
    OVERSHOOT = "overshoot"


class RateUnit(str, Enum):
    PER_MINUTE = "m"
    PER_SECOND = "s"


@dataclass(frozen=True, slots=True)
class SegmentConfig:
    start_per_minute: int
    duration_sec: float
    end_per_minute: int


@dataclass(frozen=True, slots=True)
class PlanConfig:
    segments: tuple[SegmentConfig, ...]
    end_policy: EndPolicy = EndPolicy.CLIP

    def total_duration_sec(self) -> float:
        return sum(s.duration_sec for s in self.segments)


@dataclass(frozen=True, slots=True)
class TargetConfig:
    base_url: str
    method: str = "GET"
    timeout_sec: float = 10.0
    headers: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class RetryConfig:
    enabled: bool = False
    max_retries: int = 2
    base_delay_sec: float = 0.2
    max_delay_sec: float = 2.0


@dataclass(frozen=True, slots=True)
class CircuitBreakerConfig:
    enabled: bool = False
    window_size: int = 20
    error_rate_threshold: float = 0.5
    open_cooldown_sec: float = 5.0


@dataclass(frozen=True, slots=True)
class RunConfig:
    target: TargetConfig
    plan: PlanConfig
    retry: RetryConfig = field(default_factory=RetryConfig)
    circuit_breaker: CircuitBreakerConfig = field(default_factory=CircuitBreakerConfig)
    run_id: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    notes: str = ""

    def to_metadata(self) -> Mapping[str, Any]:
        return {
            "run_id": self.run_id or "",
            "created_at": self.created_at.isoformat(),
            "notes": self.notes,
            "plan": {
                "end_policy": self.plan.end_policy.value,
                "total_duration_sec": self.plan.total_duration_sec(),
                "segments": [
                    {
                        "start_per_minute": s.start_per_minute,
                        "duration_sec": s.duration_sec,
                        "end_per_minute": s.end_per_minute,
                    }
                    for s in self.plan.segments
                ],
            },
            "target": {
                "base_url": self.target.base_url,
                "method": self.target.method,
                "timeout_sec": self.target.timeout_sec,
                "headers": dict(self.target.headers),
            },
            "retry": {
                "enabled": self.retry.enabled,
                "max_retries": self.retry.max_retries,
                "base_delay_sec": self.retry.base_delay_sec,
                "max_delay_sec": self.retry.max_delay_sec,
            },
            "circuit_breaker": {
                "enabled": self.circuit_breaker.enabled,
                "window_size": self.circuit_breaker.window_size,
                "error_rate_threshold": self.circuit_breaker.error_rate_threshold,
                "open_cooldown_sec": self.circuit_breaker.open_cooldown_sec,
            },
        }
