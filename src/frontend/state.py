"""Status rows shared by the Textual panel and the status command."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from core.due_check import next_due_at
from core.models import Category
from core.ports import CursorStorePort
from core.scheduling import to_local

TIME_FORMAT = "%Y-%m-%d %H:%M"


@dataclass
class StatusRow:
    category_id: str
    kind: str
    sort_order: str
    interval_days: int
    last_item_id: Optional[int]
    last_notified: Optional[str]
    next_due: str

    def as_cells(self) -> tuple[str, ...]:
        return (
            self.category_id,
            self.kind,
            self.sort_order,
            f"{self.interval_days}d",
            "-" if self.last_item_id is None else str(self.last_item_id),
            self.last_notified or "never",
            self.next_due,
        )


def build_status_rows(
    categories: Iterable[Category],
    store: CursorStorePort,
    now: int,
    tz_name: Optional[str] = None,
) -> list[StatusRow]:
    rows: list[StatusRow] = []
    for category in categories:
        cursor = store.get(category.id)
        due_at = next_due_at(cursor, category)
        if cursor is None or cursor.last_item_id is None:
            next_due = "first pass"
        elif due_at is None or due_at <= now:
            next_due = "due"
        else:
            next_due = to_local(due_at, tz_name).strftime(TIME_FORMAT)

        last_notified = None
        if cursor is not None and cursor.last_timestamp is not None:
            last_notified = to_local(cursor.last_timestamp, tz_name).strftime(TIME_FORMAT)

        rows.append(
            StatusRow(
                category_id=category.id,
                kind=category.kind,
                sort_order=category.sort_order,
                interval_days=category.interval_days,
                last_item_id=cursor.last_item_id if cursor else None,
                last_notified=last_notified,
                next_due=next_due,
            )
        )
    return rows
