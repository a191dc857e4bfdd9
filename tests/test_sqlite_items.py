from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from adapters.sqlite_items import NODE_TABLE, TERM_TABLE, SQLiteItemRepository, build_repositories
from core.errors import ConfigurationError


@pytest.fixture
def site_db(tmp_path: Path) -> str:
    path = tmp_path / "site.db"
    conn = sqlite3.connect(path)
    conn.execute("CREATE TABLE node_field_data (nid INTEGER, type TEXT, status INTEGER, title TEXT)")
    conn.execute("CREATE TABLE taxonomy_term_field_data (tid INTEGER, vid TEXT, status INTEGER, name TEXT)")
    conn.executemany(
        "INSERT INTO node_field_data VALUES (?, ?, ?, ?)",
        [
            (5, "article", 1, "Five"),
            (8, "article", 1, "Eight"),
            (10, "article", 0, "Draft"),
            (12, "article", 1, "Twelve"),
            (7, "page", 1, "About"),
        ],
    )
    conn.executemany(
        "INSERT INTO taxonomy_term_field_data VALUES (?, ?, ?, ?)",
        [(3, "tags", 1, "Python"), (4, "tags", 1, "SQLite")],
    )
    conn.commit()
    conn.close()
    return str(path)


def test_find_first_by_direction(site_db: str) -> None:
    repository = SQLiteItemRepository(site_db, NODE_TABLE, "https://example.org/")
    assert repository.find_first("article", "ASC").id == 5
    assert repository.find_first("article", "DESC").id == 12


def test_find_next_skips_unpublished_and_other_bundles(site_db: str) -> None:
    repository = SQLiteItemRepository(site_db, NODE_TABLE, "https://example.org")
    nxt = repository.find_next("article", "ASC", 8)
    assert nxt.id == 12
    assert nxt.title == "Twelve"
    assert nxt.category_id == "article"
    assert repository.find_next("article", "ASC", 12) is None
    assert repository.find_next("article", "DESC", 12).id == 8
    assert repository.find_next("article", "DESC", 5) is None


def test_find_next_from_missing_cursor_item(site_db: str) -> None:
    repository = SQLiteItemRepository(site_db, NODE_TABLE, "https://example.org")
    assert repository.find_next("article", "ASC", 6).id == 8


def test_canonical_urls_per_kind(site_db: str) -> None:
    repositories = build_repositories(site_db, "https://example.org/")
    node = repositories["content_type"].find_first("article", "ASC")
    term = repositories["vocabulary"].find_first("tags", "DESC")
    assert node.url == "https://example.org/node/5"
    assert term.url == "https://example.org/taxonomy/term/4"
    assert term.title == "SQLite"


def test_empty_bundle_returns_none(site_db: str) -> None:
    repository = SQLiteItemRepository(site_db, TERM_TABLE, "https://example.org")
    assert repository.find_first("categories", "ASC") is None


def test_unqueryable_site_database_raises_configuration_error(tmp_path: Path) -> None:
    repository = SQLiteItemRepository(str(tmp_path / "missing.db"), NODE_TABLE, "https://example.org")
    with pytest.raises(ConfigurationError):
        repository.find_first("article", "ASC")
