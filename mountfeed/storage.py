"""
MountFeed — mountfeed/storage.py
Persistent satisfaction records: one SQLite row per player.
===========================================================
Version:     0.2
Stack:       Python 3.11+ | sqlite3
Status:      Production-ready.

Writes are upserts keyed by player identity (REPLACE INTO); reads are
point lookups returning zero or one row. Each call opens its own
connection, so a store can be shared freely within the process.
"""

from __future__ import annotations

import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Dict, Optional

_DB_SCHEMA = """
CREATE TABLE IF NOT EXISTS mount_feeding (
    guid INTEGER PRIMARY KEY,
    satisfaction INTEGER NOT NULL
);
"""


class SatisfactionStore:
    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self.ensure_schema()

    def ensure_schema(self) -> None:
        with closing(sqlite3.connect(self._db_path)) as conn:
            conn.executescript(_DB_SCHEMA)
            conn.commit()

    def save(self, player_id: int, satisfaction: int) -> None:
        with closing(sqlite3.connect(self._db_path)) as conn:
            conn.execute(
                "REPLACE INTO mount_feeding (guid, satisfaction) VALUES (?, ?)",
                (player_id, satisfaction),
            )
            conn.commit()

    def load(self, player_id: int) -> Optional[int]:
        with closing(sqlite3.connect(self._db_path)) as conn:
            row = conn.execute(
                "SELECT satisfaction FROM mount_feeding WHERE guid = ?", (player_id,)
            ).fetchone()
        if row is None:
            return None
        return int(row[0])

    def delete(self, player_id: int) -> None:
        with closing(sqlite3.connect(self._db_path)) as conn:
            conn.execute("DELETE FROM mount_feeding WHERE guid = ?", (player_id,))
            conn.commit()

    def all_records(self) -> Dict[int, int]:
        with closing(sqlite3.connect(self._db_path)) as conn:
            rows = conn.execute("SELECT guid, satisfaction FROM mount_feeding ORDER BY guid").fetchall()
        return {int(guid): int(value) for guid, value in rows}
