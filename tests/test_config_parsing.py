from __future__ import annotations

from datetime import datetime, timezone

import pytest

from modtick.config import (
    EndPolicy,
    PlanConfig,
    RunConfig,
    SegmentConfig,
    TargetConfig,
    parse_rate,
    parse_segment,
)
from modtick.errors import ConfigError


@pytest.mark.parametrize(
    ("text", "per_minute"),
    [("90", 90), ("90/m", 90), ("3/s", 180), (" 2/S ", 120), ("0/s", 0)],
)
def test_parse_rate(text: str, per_minute: int) -> None:
    assert parse_rate(text) == per_minute


@pytest.mark.parametrize("text", ["", "fast", "-5", "5/h", "1.5/s"])
def test_parse_rate_rejects(text: str) -> None:
    with pytest.raises(ConfigError):
        parse_rate(text)


def test_parse_segment() -> None:
    assert parse_segment("10/s:30:100/s") == SegmentConfig(
        start_per_minute=600,
        duration_sec=30.0,
        end_per_minute=6000,
    )


@pytest.mark.parametrize("text", ["10/s:30", "10/s:soon:20/s", "10/s:0:20/s", "a:b:c:d"])
def test_parse_segment_rejects(text: str) -> None:
    with pytest.raises(ConfigError):
        parse_segment(text)


def test_run_metadata() -> None:
    config = RunConfig(
        target=TargetConfig(base_url="http://svc.local/"),
        plan=PlanConfig(
            segments=(SegmentConfig(60, 5.0, 120), SegmentConfig(120, 2.0, 120)),
            end_policy=EndPolicy.OVERSHOOT,
        ),
        run_id="r1",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    meta = config.to_metadata()
    assert meta["run_id"] == "r1"
    assert meta["plan"]["end_policy"] == "overshoot"
    assert meta["plan"]["total_duration_sec"] == 7.0
    assert meta["plan"]["segments"][0] == {
        "start_per_minute": 60,
        "duration_sec": 5.0,
        "end_per_minute": 120,
    }
    assert meta["target"]["method"] == "GET"
