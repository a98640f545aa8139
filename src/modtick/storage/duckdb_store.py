from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping

import duckdb
import pandas as pd

from modtick.config import RunConfig
from modtick.metrics import PerSecondMetrics, RequestEvent

_SCHEMA: Mapping[str, str] = {
    "run_meta": "run_id TEXT PRIMARY KEY, created_at TIMESTAMP, config_json TEXT, notes TEXT",
    "ticks": "run_id TEXT, seq INTEGER, offset_sec DOUBLE",
    "request_events": (
        "run_id TEXT, tick_offset_sec DOUBLE, wall_time DOUBLE, latency_ms DOUBLE, "
        "status_code INTEGER, error_type TEXT, attempts INTEGER, "
        "bytes_sent INTEGER, bytes_received INTEGER"
    ),
    "per_second": (
        "run_id TEXT, second INTEGER, requested_rps DOUBLE, scheduled_ticks INTEGER, "
        "achieved_rps DOUBLE, p50_ms DOUBLE, p95_ms DOUBLE, p99_ms DOUBLE, "
        "error_rate DOUBLE, timeout_rate DOUBLE"
    ),
}


@dataclass(slots=True)
class Storage:
    """DuckDB store for tick runs: the emitted schedule, request outcomes and
    per-second rollups, keyed by run id."""

    db_path: Path

    def __post_init__(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as con:
            for table, columns in _SCHEMA.items():
                con.execute(f"CREATE TABLE IF NOT EXISTS {table} ({columns})")

    def _connect(self) -> duckdb.DuckDBPyConnection:
        return duckdb.connect(str(self.db_path))

    def run_exists(self, run_id: str) -> bool:
        with self._connect() as con:
            result = con.execute(
                "SELECT COUNT(*) FROM run_meta WHERE run_id = ?",
                [run_id],
            ).fetchone()
            return bool(result and result[0] > 0)

    def save_run(
        self,
        config: RunConfig,
        run_id: str,
        tick_offsets: Iterable[float],
        events: Iterable[RequestEvent],
        per_second: Iterable[PerSecondMetrics],
    ) -> None:
        ticks = [{"run_id": run_id, "seq": seq, "offset_sec": o} for seq, o in enumerate(tick_offsets)]
        with self._connect() as con:
            con.execute(
                "INSERT INTO run_meta VALUES (?, ?, ?, ?)",
                [run_id, config.created_at, json.dumps(config.to_metadata()), config.notes],
            )
            _insert_rows(con, "ticks", ticks)
            _insert_rows(con, "request_events", [_event_row(e) for e in events])
            _insert_rows(con, "per_second", [asdict(m) for m in per_second])

    def load_run_meta(self, run_id: str) -> dict[str, object] | None:
        with self._connect() as con:
            row = con.execute(
                "SELECT config_json FROM run_meta WHERE run_id = ?",
                [run_id],
            ).fetchone()
            if not row:
                return None
            return json.loads(row[0])

    def load_ticks(self, run_id: str) -> pd.DataFrame:
        return self._load("ticks", run_id, order_by="seq")

    def load_per_second(self, run_id: str) -> pd.DataFrame:
        return self._load("per_second", run_id, order_by="second")

    def load_request_events(self, run_id: str) -> pd.DataFrame:
        return self._load("request_events", run_id, order_by="tick_offset_sec")

    def _load(self, table: str, run_id: str, order_by: str) -> pd.DataFrame:
        with self._connect() as con:
            return con.execute(
                f"SELECT * FROM {table} WHERE run_id = ? ORDER BY {order_by}",
                [run_id],
            ).fetchdf()


def _event_row(event: RequestEvent) -> dict[str, Any]:
    row = asdict(event)
    row["error_type"] = event.error_type.value if event.error_type else None
    return row


def _insert_rows(con: duckdb.DuckDBPyConnection, table: str, rows: list[dict[str, Any]]) -> None:
    if not rows:
        return
    frame = pd.DataFrame(rows)
    columns = ", ".join(frame.columns)
    con.register("incoming", frame)
    try:
        con.execute(f"INSERT INTO {table} ({columns}) SELECT {columns} FROM incoming")
    finally:
        con.unregister("incoming")
