from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Awaitable, Callable

import httpx

from modtick.config import RunConfig
from modtick.loadgen.breaker import CircuitBreaker
from modtick.loadgen.client import rejected_event, send_request
from modtick.metrics import RequestEvent, aggregate_per_second
from modtick.rate import IntervalPlan
from modtick.storage import Storage
from modtick.stream import Clock, MonotonicClock

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RunResult:
    run_id: str
    tick_offsets: list[float]
    events: list[RequestEvent]


ProgressCallback = Callable[[float, float], Awaitable[None]]


def _new_run_id() -> str:
    return uuid.uuid4().hex


async def run_experiment(
    config: RunConfig,
    storage: Storage,
    clock: Clock | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    progress: ProgressCallback | None = None,
) -> str:
    run_id = config.run_id or _new_run_id()
    if storage.run_exists(run_id):
        msg = f"Run {run_id} already exists"
        raise ValueError(msg)
    plan = IntervalPlan.from_config(config.plan)
    requested_rates = plan.rates_per_second()
    run_result = await _execute_load(
        run_id,
        config,
        plan,
        clock if clock is not None else MonotonicClock(),
        transport,
        progress,
    )
    per_second = aggregate_per_second(
        run_id,
        run_result.events,
        requested_rates,
        run_result.tick_offsets,
    )
    storage.save_run(config, run_id, run_result.tick_offsets, run_result.events, per_second)
    logger.info(
        "Run %s complete: %d tick(s), %d request event(s)",
        run_id,
        len(run_result.tick_offsets),
        len(run_result.events),
    )
    return run_id


async def _execute_load(
    run_id: str,
    config: RunConfig,
    plan: IntervalPlan,
    clock: Clock,
    transport: httpx.AsyncBaseTransport | None,
    progress: ProgressCallback | None,
) -> RunResult:
    events: list[RequestEvent] = []
    tick_offsets: list[float] = []
    lock = asyncio.Lock()
    breaker = None
    if config.circuit_breaker.enabled:
        breaker = CircuitBreaker(
            window_size=config.circuit_breaker.window_size,
            error_rate_threshold=config.circuit_breaker.error_rate_threshold,
            open_cooldown_sec=config.circuit_breaker.open_cooldown_sec,
            now=clock.now,
        )
    total_sec = plan.total_duration_sec
    stream = plan.into_stream(clock, config.plan.end_policy)
    started = clock.now()
    logger.info("Run %s started: %.1fs plan against %s", run_id, total_sec, config.target.base_url)
    tasks: list[asyncio.Task[None]] = []
    async with httpx.AsyncClient(transport=transport) as client:
        try:
            async for tick in stream:
                offset = tick - started
                tick_offsets.append(offset)
                tasks.append(
                    asyncio.create_task(
                        _fire(client, run_id, config, events, breaker, lock, offset)
                    )
                )
                if progress:
                    await progress(offset, total_sec)
            if tasks:
                await asyncio.gather(*tasks)
        finally:
            await _cancel_pending(tasks)
    return RunResult(run_id=run_id, tick_offsets=tick_offsets, events=events)


async def _fire(
    client: httpx.AsyncClient,
    run_id: str,
    config: RunConfig,
    events: list[RequestEvent],
    breaker: CircuitBreaker | None,
    lock: asyncio.Lock,
    offset: float,
) -> None:
    if breaker is not None and not breaker.allow_request():
        event = rejected_event(run_id, offset)
    else:
        response = await send_request(client, run_id, offset, config.target, config.retry)
        if breaker is not None:
            breaker.record(response.success)
        event = response.event
    async with lock:
        events.append(event)


async def _cancel_pending(tasks: list[asyncio.Task[None]]) -> None:
    pending = [task for task in tasks if not task.done()]
    for task in pending:
        task.cancel()
    if pending:
        logger.warning("Cancelling %d in-flight request(s)", len(pending))
        await asyncio.gather(*pending, return_exceptions=True)
