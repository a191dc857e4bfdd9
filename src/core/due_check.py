"""Cursor walk and interval gating (core domain).

The cursor stores the specific item id last notified for a category. The next
candidate is always the adjacent published item strictly beyond it in the
configured direction, so the walk is monotonic and survives items being
unpublished or deleted between runs. There is no wraparound: an exhausted
category stays silent until new items appear ahead of the cursor.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from core.errors import ConfigurationError, NoEligibleItemError
from core.models import (
    REASON_BYPASS,
    REASON_COLD_START,
    REASON_DUE,
    REASON_EMPTY,
    REASON_EXHAUSTED,
    REASON_NOT_DUE,
    SECONDS_PER_DAY,
    Category,
    Cursor,
    Evaluation,
    Item,
)
from core.ports import CursorStorePort, ItemRepositoryPort

LOGGER = logging.getLogger(__name__)


def interval_elapsed(now: int, last_timestamp: int, interval_days: int) -> bool:
    """Return True once at least interval_days have passed (boundary inclusive)."""

    return now - last_timestamp >= interval_days * SECONDS_PER_DAY


def next_due_at(cursor: Optional[Cursor], category: Category) -> Optional[int]:
    """Epoch second at which the category becomes due again, if it has a cursor."""

    if cursor is None or cursor.last_timestamp is None:
        return None
    return cursor.last_timestamp + category.interval_seconds


class DueCheckEngine:
    """Decides, per category, whether to notify now and about which item."""

    def __init__(
        self,
        store: CursorStorePort,
        repositories: Mapping[str, ItemRepositoryPort],
    ) -> None:
        self._store = store
        self._repositories = dict(repositories)

    def repository_for(self, category: Category) -> ItemRepositoryPort:
        try:
            return self._repositories[category.kind]
        except KeyError:
            raise ConfigurationError(
                f"No item repository registered for kind {category.kind!r} (category {category.id})"
            ) from None

    def evaluate(self, category: Category, now: int, bypass_interval: bool = False) -> Evaluation:
        """Return the eligibility decision and candidate for one category."""

        repository = self.repository_for(category)
        cursor = self._store.get(category.id)

        if cursor is None or cursor.last_item_id is None:
            try:
                item = self._first_candidate(repository, category)
            except NoEligibleItemError as exc:
                LOGGER.warning("%s; no update email sent", exc)
                return Evaluation(eligible=False, candidate=None, reason=REASON_EMPTY)
            # No prior timestamp to compare against, so the interval is ignored.
            return Evaluation(eligible=True, candidate=item, reason=REASON_COLD_START)

        # The lookup filters on id comparison only, so it still works when the
        # cursor's own item was unpublished or deleted since the last pass.
        item = repository.find_next(category.id, category.sort_order, cursor.last_item_id)
        if item is None:
            LOGGER.debug("Category %s exhausted after item %s", category.id, cursor.last_item_id)
            return Evaluation(eligible=False, candidate=None, reason=REASON_EXHAUSTED)

        if bypass_interval:
            return Evaluation(eligible=True, candidate=item, reason=REASON_BYPASS)

        # A missing timestamp on an existing cursor row is treated as "long ago".
        last_timestamp = cursor.last_timestamp if cursor.last_timestamp is not None else 0
        if interval_elapsed(now, last_timestamp, category.interval_days):
            return Evaluation(eligible=True, candidate=item, reason=REASON_DUE)

        return Evaluation(eligible=False, candidate=item, reason=REASON_NOT_DUE)

    @staticmethod
    def _first_candidate(repository: ItemRepositoryPort, category: Category) -> Item:
        item = repository.find_first(category.id, category.sort_order)
        if item is None:
            raise NoEligibleItemError(f"No published item found for category {category.id}")
        return item
