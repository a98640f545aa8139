from __future__ import annotations

import asyncio
import time
from typing import Protocol


class Clock(Protocol):
    """Time source and suspension primitive used by a tick stream.

    ``now()`` is a monotonically non-decreasing reading in seconds. ``sleep()``
    suspends the calling task for at least ``seconds`` and must be safe to
    cancel.
    """

    def now(self) -> float:
        ...

    async def sleep(self, seconds: float) -> None:
        ...


class MonotonicClock:
    __slots__ = ()

    def now(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        if seconds > 0:
            await asyncio.sleep(seconds)


class VirtualClock:
    """Manually driven clock for deterministic runs.

    ``sleep()`` moves virtual time forward by the requested amount and yields
    to the event loop once, so a full schedule plays out without real delays.
    ``advance()`` moves time forward from outside, e.g. to model a consumer
    that falls behind.
    """

    __slots__ = ("_now", "sleeps")

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        if seconds < 0:
            msg = f"Cannot move a clock backwards (advance by {seconds})"
            raise ValueError(msg)
        self._now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        await asyncio.sleep(0)
        if seconds > 0:
            self._now += seconds
