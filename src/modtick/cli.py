from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from modtick.config import (
    CircuitBreakerConfig,
    EndPolicy,
    PlanConfig,
    RetryConfig,
    RunConfig,
    TargetConfig,
    parse_segment,
)
from modtick.errors import ConfigError
from modtick.logging_config import configure_from_env, enable_console_logging
from modtick.loadgen.runner import run_experiment
from modtick.rate import IntervalPlan
from modtick.storage import Storage, default_storage
from modtick.stream import VirtualClock, collect_ticks


def _plan_config(args: argparse.Namespace) -> PlanConfig:
    segments = tuple(parse_segment(text) for text in args.segment)
    return PlanConfig(segments=segments, end_policy=EndPolicy(args.end_policy))


async def preview_ticks(plan_config: PlanConfig, limit: int | None = None) -> list[float]:
    """Play a plan on a virtual clock and return tick offsets from its start."""
    clock = VirtualClock()
    stream = IntervalPlan.from_config(plan_config).into_stream(clock, plan_config.end_policy)
    return await collect_ticks(stream, limit)


def _preview(args: argparse.Namespace) -> int:
    plan_config = _plan_config(args)
    ticks = asyncio.run(preview_ticks(plan_config, args.limit))
    previous = 0.0
    for seq, tick in enumerate(ticks):
        print(f"{seq:6d}  t={tick:10.4f}s  +{tick - previous:.4f}s")
        previous = tick
    print(f"{len(ticks)} tick(s) over {plan_config.total_duration_sec():.1f}s")
    return 0


def _run(args: argparse.Namespace) -> int:
    config = RunConfig(
        target=TargetConfig(base_url=args.target, method=args.method),
        plan=_plan_config(args),
        retry=RetryConfig(enabled=args.retries),
        circuit_breaker=CircuitBreakerConfig(enabled=args.circuit_breaker),
        run_id=args.run_id,
        notes=args.notes,
    )
    storage = Storage(Path(args.db)) if args.db else default_storage()
    run_id = asyncio.run(run_experiment(config, storage))
    print(f"Run complete: {run_id}")
    return 0


def _add_plan_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--segment",
        action="append",
        required=True,
        help="START:DURATION:END, rates as N (per minute), N/m or N/s; repeatable",
    )
    parser.add_argument("--end-policy", choices=[p.value for p in EndPolicy], default="clip")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="modtick", description="Rate-modulated tick streams")
    parser.add_argument("--log-level", default=None, help="Enable console logging at this level")
    sub = parser.add_subparsers(dest="command", required=True)

    preview = sub.add_parser("preview", help="Print the tick schedule on a virtual clock")
    _add_plan_arguments(preview)
    preview.add_argument("--limit", type=int, default=None)
    preview.set_defaults(func=_preview)

    run = sub.add_parser("run", help="Fire one HTTP request per tick")
    _add_plan_arguments(run)
    run.add_argument("--target", required=True, help="Target URL")
    run.add_argument("--method", default="GET")
    run.add_argument("--retries", action="store_true")
    run.add_argument("--circuit-breaker", action="store_true")
    run.add_argument("--run-id", default=None)
    run.add_argument("--notes", default="")
    run.add_argument("--db", default=None, help="DuckDB file (default .modtick/modtick.duckdb)")
    run.set_defaults(func=_run)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.log_level:
        enable_console_logging(args.log_level)
    else:
        configure_from_env()
    try:
        return args.func(args)
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
