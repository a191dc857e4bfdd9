from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from adapters.sqlite_storage import SQLiteCursorStore
from core.errors import StorageError
from core.models import Cursor


def _store(tmp_path: Path) -> SQLiteCursorStore:
    store = SQLiteCursorStore(str(tmp_path / "nudger.db"))
    store.init_db()
    return store


def _row_count(tmp_path: Path, category_id: str) -> int:
    conn = sqlite3.connect(tmp_path / "nudger.db")
    try:
        return conn.execute(
            "SELECT COUNT(*) FROM cursors WHERE category_id = ?", (category_id,)
        ).fetchone()[0]
    finally:
        conn.close()


def test_get_missing_cursor_returns_none(tmp_path: Path) -> None:
    assert _store(tmp_path).get("articles") is None


def test_upsert_twice_keeps_single_row(tmp_path: Path) -> None:
    store = _store(tmp_path)
    store.upsert("articles", 5, 100)
    store.upsert("articles", 8, 90000)

    assert _row_count(tmp_path, "articles") == 1
    assert store.get("articles") == Cursor("articles", 8, 90000)


def test_init_db_is_idempotent(tmp_path: Path) -> None:
    store = _store(tmp_path)
    store.upsert("articles", 5, 100)
    store.init_db()
    assert store.get("articles") == Cursor("articles", 5, 100)


def test_delete_for_categories_and_list(tmp_path: Path) -> None:
    store = _store(tmp_path)
    store.upsert("articles", 5, 100)
    store.upsert("tags", 2, 100)
    store.upsert("pages", 1, 100)

    removed = store.delete_for_categories({"tags", "pages", "unknown"})

    assert removed == 2
    assert store.list_category_ids() == {"articles"}
    assert store.delete_for_categories([]) == 0


def test_scheduler_state_roundtrip(tmp_path: Path) -> None:
    store = _store(tmp_path)
    assert store.get_last_run("periodic") is None
    store.set_last_run("periodic", 1000)
    store.set_last_run("periodic", 2000)
    assert store.get_last_run("periodic") == 2000


def test_unusable_database_raises_storage_error(tmp_path: Path) -> None:
    store = SQLiteCursorStore(str(tmp_path))
    with pytest.raises(StorageError):
        store.init_db()
    with pytest.raises(StorageError):
        store.get("articles")
