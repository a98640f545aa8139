from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass

import httpx

from modtick.config import RetryConfig, TargetConfig
from modtick.metrics import ErrorType, RequestEvent


@dataclass(frozen=True, slots=True)
class ClientResponse:
    event: RequestEvent
    success: bool


async def send_request(
    client: httpx.AsyncClient,
    run_id: str,
    tick_offset_sec: float,
    target: TargetConfig,
    retry: RetryConfig,
) -> ClientResponse:
    start_wall = time.time()
    start_perf = time.perf_counter()
    attempt = 0
    while True:
        attempt += 1
        try:
            resp = await client.request(
                target.method,
                target.base_url,
                headers=dict(target.headers),
                timeout=target.timeout_sec,
            )
            event = RequestEvent(
                run_id=run_id,
                tick_offset_sec=tick_offset_sec,
                wall_time=start_wall,
                latency_ms=(time.perf_counter() - start_perf) * 1000.0,
                status_code=resp.status_code,
                error_type=None if resp.is_success else ErrorType.OTHER,
                attempts=attempt,
                bytes_sent=len(resp.request.content or b""),
                bytes_received=len(resp.content or b""),
            )
            return ClientResponse(event=event, success=resp.is_success)
        except httpx.TimeoutException:
            err = ErrorType.TIMEOUT
        except httpx.ConnectError:
            err = ErrorType.CONNECT
        except httpx.ReadError:
            err = ErrorType.READ
        except httpx.HTTPError:
            err = ErrorType.OTHER
        if not retry.enabled or attempt > retry.max_retries:
            event = RequestEvent(
                run_id=run_id,
                tick_offset_sec=tick_offset_sec,
                wall_time=start_wall,
                latency_ms=(time.perf_counter() - start_perf) * 1000.0,
                status_code=None,
                error_type=err,
                attempts=attempt,
                bytes_sent=0,
                bytes_received=0,
            )
            return ClientResponse(event=event, success=False)
        delay = min(retry.max_delay_sec, retry.base_delay_sec * (2 ** (attempt - 1)))
        await asyncio.sleep(delay)


def rejected_event(run_id: str, tick_offset_sec: float) -> RequestEvent:
    return RequestEvent(
        run_id=run_id,
        tick_offset_sec=tick_offset_sec,
        wall_time=time.time(),
        latency_ms=-1.0,
        status_code=None,
        error_type=ErrorType.REJECTED,
        attempts=0,
        bytes_sent=0,
        bytes_received=0,
    )
