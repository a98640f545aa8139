from __future__ import annotations

import asyncio
from pathlib import Path

import httpx
import pytest

from modtick import VirtualClock
from modtick.config import (
    CircuitBreakerConfig,
    PlanConfig,
    RetryConfig,
    RunConfig,
    SegmentConfig,
    TargetConfig,
)
from modtick.loadgen import run_experiment
from modtick.storage import Storage


def _config(run_id: str, **overrides: object) -> RunConfig:
    return RunConfig(
        target=TargetConfig(base_url="http://svc.test/ping"),
        plan=PlanConfig(segments=(SegmentConfig(120, 3.0, 120),)),
        run_id=run_id,
        **overrides,
    )


def test_one_request_per_tick(tmp_path: Path) -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, text="pong")

    storage = Storage(tmp_path / "runs.duckdb")
    run_id = asyncio.run(
        run_experiment(
            _config("steady"),
            storage,
            clock=VirtualClock(),
            transport=httpx.MockTransport(handler),
        )
    )
    assert run_id == "steady"
    assert len(seen) == 6
    ticks = storage.load_ticks(run_id)
    assert ticks["offset_sec"].tolist() == [0.5, 1.0, 1.5, 2.0, 2.5, 3.0]
    per_second = storage.load_per_second(run_id)
    assert per_second["requested_rps"].tolist() == [2.0, 2.0, 2.0]
    assert per_second["scheduled_ticks"].tolist() == [1, 2, 3]
    assert per_second["achieved_rps"].sum() == 6.0
    events = storage.load_request_events(run_id)
    assert set(events["status_code"]) == {200}
    meta = storage.load_run_meta(run_id)
    assert meta is not None
    assert meta["plan"]["segments"][0]["start_per_minute"] == 120


def test_failures_are_retried_and_classified(tmp_path: Path) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    storage = Storage(tmp_path / "runs.duckdb")
    retry = RetryConfig(enabled=True, max_retries=2, base_delay_sec=0.0, max_delay_sec=0.0)
    run_id = asyncio.run(
        run_experiment(
            _config("down", retry=retry),
            storage,
            clock=VirtualClock(),
            transport=httpx.MockTransport(handler),
        )
    )
    events = storage.load_request_events(run_id)
    assert len(events) == 6
    assert set(events["error_type"]) == {"connect"}
    assert set(events["attempts"]) == {3}
    assert storage.load_per_second(run_id)["error_rate"].tolist() == [1.0, 1.0, 1.0]


def test_breaker_rejects_after_errors(tmp_path: Path) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    storage = Storage(tmp_path / "runs.duckdb")
    breaker = CircuitBreakerConfig(enabled=True, window_size=2, open_cooldown_sec=60.0)
    config = RunConfig(
        target=TargetConfig(base_url="http://svc.test/ping"),
        plan=PlanConfig(segments=(SegmentConfig(480, 3.0, 480),)),
        circuit_breaker=breaker,
        run_id="flaky",
    )
    run_id = asyncio.run(
        run_experiment(
            config,
            storage,
            clock=VirtualClock(),
            transport=httpx.MockTransport(handler),
        )
    )
    events = storage.load_request_events(run_id)
    assert len(events) == 24
    assert {"other", "rejected"} <= set(events["error_type"])


def test_duplicate_run_id_is_refused(tmp_path: Path) -> None:
    storage = Storage(tmp_path / "runs.duckdb")
    transport = httpx.MockTransport(lambda request: httpx.Response(204))
    asyncio.run(run_experiment(_config("dup"), storage, clock=VirtualClock(), transport=transport))
    with pytest.raises(ValueError, match="already exists"):
        asyncio.run(
            run_experiment(_config("dup"), storage, clock=VirtualClock(), transport=transport)
        )


def test_aborted_run_cancels_in_flight_requests(tmp_path: Path) -> None:
    started: list[float] = []
    cancelled: list[float] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        marker = float(len(started))
        started.append(marker)
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            cancelled.append(marker)
            raise
        return httpx.Response(200)

    async def progress(offset: float, total: float) -> None:
        if offset >= 0.5:
            for _ in range(10):
                await asyncio.sleep(0)
            raise RuntimeError("dashboard went away")

    config = RunConfig(
        target=TargetConfig(base_url="http://svc.test/ping"),
        plan=PlanConfig(segments=(SegmentConfig(480, 3.0, 480),)),
        run_id="aborted",
    )
    storage = Storage(tmp_path / "runs.duckdb")
    with pytest.raises(RuntimeError, match="dashboard went away"):
        asyncio.run(
            run_experiment(
                config,
                storage,
                clock=VirtualClock(),
                transport=httpx.MockTransport(handler),
                progress=progress,
            )
        )
    assert started
    assert sorted(cancelled) == started
    assert not storage.run_exists("aborted")
