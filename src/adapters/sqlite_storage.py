"""SQLite cursor store adapter.

Implements the core CursorStorePort using a simple SQLite database.
"""

from __future__ import annotations

import sqlite3
from typing import Iterable, Optional

from core.errors import StorageError
from core.models import Cursor


class SQLiteCursorStore:
    """Thin SQLite wrapper that satisfies the CursorStorePort contract."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - cursors: per-category last notified item and time
        - scheduler_state: last run times of the periodic trigger gate
        """

        try:
            with self._connect() as conn:
                # cursors keeps exactly one row per category; the primary key is
                # what makes the upsert below atomic under overlapping passes.
                # Fields:
                # - category_id: configured category id (PRIMARY KEY)
                # - last_item_id: id of the last notified item, NULL if never
                # - last_timestamp: epoch seconds of the last notification
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS cursors (
                        category_id TEXT PRIMARY KEY,
                        last_item_id INTEGER,
                        last_timestamp INTEGER
                    )
                    """
                )
                # scheduler_state is a small key/value table for the daily gate.
                # Fields:
                # - name: trigger name (PRIMARY KEY)
                # - last_run: epoch seconds of the last gated run
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS scheduler_state (
                        name TEXT PRIMARY KEY,
                        last_run INTEGER NOT NULL
                    )
                    """
                )
        except sqlite3.Error as exc:
            raise StorageError(f"Could not initialize cursor store at {self._db_path}: {exc}") from exc

    def get(self, category_id: str) -> Optional[Cursor]:
        """Return the cursor for a category, if any."""

        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT category_id, last_item_id, last_timestamp FROM cursors WHERE category_id = ?",
                    (category_id,),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Could not read cursor for {category_id}: {exc}") from exc
        if row is None:
            return None
        return Cursor(
            category_id=row["category_id"],
            last_item_id=row["last_item_id"],
            last_timestamp=row["last_timestamp"],
        )

    def upsert(self, category_id: str, item_id: int, timestamp: int) -> None:
        """Create or overwrite the single cursor row for a category in one statement."""

        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO cursors (category_id, last_item_id, last_timestamp)
                    VALUES (?, ?, ?)
                    ON CONFLICT(category_id) DO UPDATE SET
                        last_item_id = excluded.last_item_id,
                        last_timestamp = excluded.last_timestamp
                    """,
                    (category_id, item_id, timestamp),
                )
        except sqlite3.Error as exc:
            raise StorageError(f"Could not advance cursor for {category_id}: {exc}") from exc

    def delete_for_categories(self, category_ids: Iterable[str]) -> int:
        """Delete cursors for the given categories and return the number removed."""

        ids = sorted(set(category_ids))
        if not ids:
            return 0
        placeholders = ", ".join("?" for _ in ids)
        try:
            with self._connect() as conn:
                cur = conn.execute(
                    f"DELETE FROM cursors WHERE category_id IN ({placeholders})",
                    ids,
                )
                return cur.rowcount
        except sqlite3.Error as exc:
            raise StorageError(f"Could not delete cursors: {exc}") from exc

    def list_category_ids(self) -> set[str]:
        """Return all category ids currently tracked in cursors."""

        try:
            with self._connect() as conn:
                rows = conn.execute("SELECT category_id FROM cursors").fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"Could not list cursors: {exc}") from exc
        return {row["category_id"] for row in rows}

    def get_last_run(self, name: str) -> Optional[int]:
        """Return the last gated run time for a trigger, if any."""

        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT last_run FROM scheduler_state WHERE name = ?",
                    (name,),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Could not read scheduler state for {name}: {exc}") from exc
        return int(row["last_run"]) if row else None

    def set_last_run(self, name: str, timestamp: int) -> None:
        """Upsert the last gated run time for a trigger."""

        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO scheduler_state (name, last_run)
                    VALUES (?, ?)
                    ON CONFLICT(name) DO UPDATE SET last_run = excluded.last_run
                    """,
                    (name, timestamp),
                )
        except sqlite3.Error as exc:
            raise StorageError(f"Could not write scheduler state for {name}: {exc}") from exc
