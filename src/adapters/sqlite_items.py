"""SQLite item repository adapters.

Read published nodes and taxonomy terms from the site's content database.
The database is opened read-only; items are owned by the site.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from core.errors import ConfigurationError
from core.models import KIND_CONTENT_TYPE, KIND_VOCABULARY, SORT_ASC, Item


@dataclass(frozen=True)
class ItemTable:
    """Where a category kind's items live and how their canonical path is built."""

    table: str
    id_column: str
    bundle_column: str
    title_column: str
    status_column: str
    path_prefix: str


NODE_TABLE = ItemTable(
    table="node_field_data",
    id_column="nid",
    bundle_column="type",
    title_column="title",
    status_column="status",
    path_prefix="node",
)

TERM_TABLE = ItemTable(
    table="taxonomy_term_field_data",
    id_column="tid",
    bundle_column="vid",
    title_column="name",
    status_column="status",
    path_prefix="taxonomy/term",
)


class SQLiteItemRepository:
    """ItemRepositoryPort over one item table of the site database."""

    def __init__(self, db_path: str, table: ItemTable, base_url: str) -> None:
        self._db_path = db_path
        self._table = table
        self._base_url = base_url.rstrip("/")

    def _connect(self) -> sqlite3.Connection:
        uri = Path(self._db_path).resolve().as_uri() + "?mode=ro"
        conn = sqlite3.connect(uri, uri=True)
        conn.row_factory = sqlite3.Row
        return conn

    def canonical_url(self, item_id: int) -> str:
        return f"{self._base_url}/{self._table.path_prefix}/{item_id}"

    def find_next(self, category_id: str, sort_order: str, after_id: Optional[int]) -> Optional[Item]:
        """Return the published item adjacent to after_id in sort order, if any."""

        if after_id is None:
            return self.find_first(category_id, sort_order)
        comparison = ">" if sort_order == SORT_ASC else "<"
        return self._fetch_one(category_id, sort_order, f"AND {self._table.id_column} {comparison} ?", (after_id,))

    def find_first(self, category_id: str, sort_order: str) -> Optional[Item]:
        """Return the lowest (ASC) or highest (DESC) published item."""

        return self._fetch_one(category_id, sort_order, "", ())

    def _fetch_one(self, category_id: str, sort_order: str, bound: str, bound_args: tuple) -> Optional[Item]:
        t = self._table
        direction = "ASC" if sort_order == SORT_ASC else "DESC"
        query = f"""
            SELECT {t.id_column} AS id, {t.title_column} AS title
            FROM {t.table}
            WHERE {t.bundle_column} = ? AND {t.status_column} = 1 {bound}
            ORDER BY {t.id_column} {direction}
            LIMIT 1
        """
        try:
            with self._connect() as conn:
                row = conn.execute(query, (category_id, *bound_args)).fetchone()
        except sqlite3.Error as exc:
            raise ConfigurationError(
                f"Cannot query {t.table} for category {category_id} in {self._db_path}: {exc}"
            ) from exc
        if row is None:
            return None
        item_id = int(row["id"])
        return Item(
            id=item_id,
            category_id=category_id,
            published=True,
            title=str(row["title"]),
            url=self.canonical_url(item_id),
        )


def build_repositories(db_path: str, base_url: str) -> dict[str, SQLiteItemRepository]:
    """Return one repository per category kind, keyed the way DueCheckEngine expects."""

    return {
        KIND_CONTENT_TYPE: SQLiteItemRepository(db_path, NODE_TABLE, base_url),
        KIND_VOCABULARY: SQLiteItemRepository(db_path, TERM_TABLE, base_url),
    }
