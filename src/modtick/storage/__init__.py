from __future__ import annotations

from pathlib import Path

from modtick.storage.duckdb_store import Storage


def default_storage() -> Storage:
    return Storage(Path(".modtick/modtick.duckdb"))


__all__ = ["Storage", "default_storage"]
