from __future__ import annotations

from modtick.loadgen.breaker import CircuitBreaker
from modtick.loadgen.client import ClientResponse, send_request
from modtick.loadgen.runner import RunResult, run_experiment

__all__ = ["CircuitBreaker", "ClientResponse", "RunResult", "run_experiment", "send_request"]
