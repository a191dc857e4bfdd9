from __future__ import annotations

from typing import Iterable, Optional

import pytest

from core.due_check import DueCheckEngine, interval_elapsed, next_due_at
from core.errors import ConfigurationError
from core.models import Category, Cursor, Item


class FakeStore:
    def __init__(self) -> None:
        self.cursors: dict[str, Cursor] = {}

    def get(self, category_id: str) -> Optional[Cursor]:
        return self.cursors.get(category_id)

    def upsert(self, category_id: str, item_id: int, timestamp: int) -> None:
        self.cursors[category_id] = Cursor(category_id, item_id, timestamp)

    def delete_for_categories(self, category_ids: Iterable[str]) -> int:
        removed = 0
        for category_id in list(category_ids):
            if self.cursors.pop(category_id, None) is not None:
                removed += 1
        return removed

    def list_category_ids(self) -> set[str]:
        return set(self.cursors)


class FakeRepository:
    def __init__(self, items: Iterable[Item]) -> None:
        self.items = list(items)

    def _published(self, category_id: str) -> list[Item]:
        return sorted(
            (item for item in self.items if item.category_id == category_id and item.published),
            key=lambda item: item.id,
        )

    def find_first(self, category_id: str, sort_order: str) -> Optional[Item]:
        items = self._published(category_id)
        if not items:
            return None
        return items[0] if sort_order == "ASC" else items[-1]

    def find_next(self, category_id: str, sort_order: str, after_id: Optional[int]) -> Optional[Item]:
        if after_id is None:
            return self.find_first(category_id, sort_order)
        items = self._published(category_id)
        if sort_order == "ASC":
            ahead = [item for item in items if item.id > after_id]
            return ahead[0] if ahead else None
        ahead = [item for item in items if item.id < after_id]
        return ahead[-1] if ahead else None


def _item(item_id: int, category_id: str = "articles", published: bool = True) -> Item:
    return Item(
        id=item_id,
        category_id=category_id,
        published=published,
        title=f"Item {item_id}",
        url=f"http://x/node/{item_id}",
    )


def _category(sort_order: str = "ASC", interval_days: int = 1, kind: str = "content_type") -> Category:
    return Category(
        id="articles",
        kind=kind,
        sort_order=sort_order,
        interval_days=interval_days,
        recipients=("a@x",),
        template="[entity-title]",
    )


def _engine(items: Iterable[Item], store: Optional[FakeStore] = None) -> tuple[DueCheckEngine, FakeStore]:
    store = store or FakeStore()
    engine = DueCheckEngine(store, {"content_type": FakeRepository(items)})
    return engine, store


def test_cold_start_ascending_picks_lowest_id_ignoring_interval() -> None:
    engine, _ = _engine([_item(8), _item(5), _item(12)])
    evaluation = engine.evaluate(_category(interval_days=30), now=0)
    assert evaluation.eligible
    assert evaluation.candidate.id == 5
    assert evaluation.reason == "cold_start"


def test_cold_start_descending_picks_highest_id() -> None:
    engine, _ = _engine([_item(8), _item(5), _item(12)])
    evaluation = engine.evaluate(_category(sort_order="DESC"), now=0)
    assert evaluation.candidate.id == 12


def test_cold_start_skips_unpublished_items() -> None:
    engine, _ = _engine([_item(3, published=False), _item(7)])
    evaluation = engine.evaluate(_category(), now=0)
    assert evaluation.candidate.id == 7


def test_empty_category_is_not_eligible_and_logged(caplog: pytest.LogCaptureFixture) -> None:
    engine, _ = _engine([_item(3, published=False), _item(4, category_id="pages")])
    with caplog.at_level("WARNING"):
        evaluation = engine.evaluate(_category(), now=0)
    assert not evaluation.eligible
    assert evaluation.candidate is None
    assert evaluation.reason == "empty"
    assert "No published item found for category articles" in caplog.text


def test_next_item_ascending_is_strictly_greater() -> None:
    store = FakeStore()
    store.upsert("articles", 5, 0)
    engine, _ = _engine([_item(5), _item(8), _item(12)], store)
    evaluation = engine.evaluate(_category(), now=86400)
    assert evaluation.eligible
    assert evaluation.candidate.id == 8
    assert evaluation.reason == "due"


def test_next_item_descending_is_strictly_less() -> None:
    store = FakeStore()
    store.upsert("articles", 12, 0)
    engine, _ = _engine([_item(5), _item(8), _item(12)], store)
    evaluation = engine.evaluate(_category(sort_order="DESC"), now=86400)
    assert evaluation.candidate.id == 8


def test_interval_boundary_is_inclusive() -> None:
    store = FakeStore()
    store.upsert("articles", 5, 1000)
    engine, _ = _engine([_item(5), _item(8)], store)
    category = _category(interval_days=2)

    early = engine.evaluate(category, now=1000 + 2 * 86400 - 1)
    assert not early.eligible
    assert early.reason == "not_due"

    on_time = engine.evaluate(category, now=1000 + 2 * 86400)
    assert on_time.eligible
    assert on_time.candidate.id == 8


def test_bypass_ignores_interval_when_candidate_exists() -> None:
    store = FakeStore()
    store.upsert("articles", 5, 1000)
    engine, _ = _engine([_item(5), _item(8)], store)
    evaluation = engine.evaluate(_category(interval_days=30), now=1001, bypass_interval=True)
    assert evaluation.eligible
    assert evaluation.reason == "bypass"


def test_exhausted_cursor_does_not_wrap_even_with_bypass() -> None:
    store = FakeStore()
    store.upsert("articles", 12, 0)
    engine, _ = _engine([_item(5), _item(8), _item(12)], store)
    evaluation = engine.evaluate(_category(), now=10 * 86400, bypass_interval=True)
    assert not evaluation.eligible
    assert evaluation.reason == "exhausted"


def test_zero_or_negative_interval_is_always_due() -> None:
    store = FakeStore()
    store.upsert("articles", 5, 1000)
    engine, _ = _engine([_item(5), _item(8)], store)
    assert engine.evaluate(_category(interval_days=0), now=1000).eligible
    assert engine.evaluate(_category(interval_days=-3), now=1000).eligible


def test_cursor_item_removed_still_advances_to_next_survivor() -> None:
    store = FakeStore()
    store.upsert("articles", 8, 0)
    # Item 8 was deleted and 10 unpublished since the last pass.
    engine, _ = _engine([_item(5), _item(10, published=False), _item(12)], store)
    evaluation = engine.evaluate(_category(), now=86400)
    assert evaluation.candidate.id == 12


def test_unknown_kind_raises_configuration_error() -> None:
    engine, _ = _engine([_item(5)])
    with pytest.raises(ConfigurationError):
        engine.evaluate(_category(kind="vocabulary"), now=0)


def test_interval_helpers() -> None:
    assert interval_elapsed(86400, 0, 1)
    assert not interval_elapsed(86399, 0, 1)
    assert next_due_at(None, _category()) is None
    assert next_due_at(Cursor("articles", 5, 100), _category(interval_days=2)) == 100 + 2 * 86400
