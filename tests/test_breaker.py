from __future__ import annotations

from modtick import VirtualClock
from modtick.loadgen import CircuitBreaker


def _breaker(clock: VirtualClock) -> CircuitBreaker:
    return CircuitBreaker(
        window_size=4,
        error_rate_threshold=0.5,
        open_cooldown_sec=5.0,
        now=clock.now,
    )


def test_opens_on_error_rate_and_recovers() -> None:
    clock = VirtualClock()
    breaker = _breaker(clock)
    for success in (True, False, True, False):
        breaker.record(success)
    assert breaker.state == "open"
    assert not breaker.allow_request()
    clock.advance(5.0)
    assert breaker.allow_request()
    assert breaker.state == "half_open"
    breaker.record(True)
    assert breaker.state == "closed"


def test_half_open_failure_reopens() -> None:
    clock = VirtualClock()
    breaker = _breaker(clock)
    for _ in range(4):
        breaker.record(False)
    clock.advance(6.0)
    assert breaker.allow_request()
    breaker.record(False)
    assert breaker.state == "open"
    assert not breaker.allow_request()


def test_history_is_per_instance() -> None:
    clock = VirtualClock()
    first = _breaker(clock)
    second = _breaker(clock)
    for _ in range(4):
        first.record(False)
    second.record(True)
    assert first.state == "open"
    assert second.state == "closed"
