"""Core notification pass.

This module is integration-agnostic. It only relies on ports for cursor
storage, item lookup and mail delivery, enabling other triggers or adapters
without changes here.
"""

from __future__ import annotations

import logging
from typing import Iterable, List

from core.dispatcher import NotificationDispatcher
from core.due_check import DueCheckEngine
from core.errors import NudgerError
from core.models import (
    STATUS_ERROR,
    STATUS_SENT,
    STATUS_SKIPPED,
    Category,
    CategoryResult,
)
from core.ports import CategorySourcePort, CursorStorePort

LOGGER = logging.getLogger(__name__)


class NotificationPass:
    """Orchestrates due checks, dispatch and cursor advancement for all categories."""

    def __init__(
        self,
        categories: CategorySourcePort,
        store: CursorStorePort,
        engine: DueCheckEngine,
        dispatcher: NotificationDispatcher,
    ) -> None:
        self._categories = categories
        self._store = store
        self._engine = engine
        self._dispatcher = dispatcher

    def run(self, now: int, bypass_interval: bool = False) -> List[CategoryResult]:
        """Process every configured category once; never raises as a whole."""

        results: List[CategoryResult] = []
        try:
            categories = self._categories.list_categories()
        except NudgerError:
            LOGGER.exception("Could not load categories; notification pass skipped")
            categories = []

        for category in categories:
            try:
                result = self._handle(category, now, bypass_interval)
            except Exception as exc:
                # One category's repository or storage failure must not stop the others.
                LOGGER.exception("Notification pass failed for category %s", category.id)
                result = CategoryResult(category_id=category.id, status=STATUS_ERROR, error=str(exc))
            results.append(result)

        LOGGER.info(
            "Notification pass complete: categories=%s, sent=%s, errors=%s",
            len(results),
            sum(1 for result in results if result.status == STATUS_SENT),
            sum(1 for result in results if result.status == STATUS_ERROR),
        )
        return results

    def _handle(self, category: Category, now: int, bypass_interval: bool) -> CategoryResult:
        evaluation = self._engine.evaluate(category, now, bypass_interval)
        if not evaluation.eligible or evaluation.candidate is None:
            LOGGER.debug("Category %s skipped (%s)", category.id, evaluation.reason)
            return CategoryResult(category_id=category.id, status=STATUS_SKIPPED, evaluation=evaluation)

        item = evaluation.candidate
        outcomes = self._dispatcher.send(item, category.recipients, category.template)

        # The cursor tracks "was attempted", not "was delivered": it advances
        # even when every recipient failed.
        self._store.upsert(category.id, item.id, now)
        LOGGER.info(
            "Cursor for %s advanced to item %s (%s/%s delivered)",
            category.id,
            item.id,
            sum(1 for outcome in outcomes if outcome.success),
            len(outcomes),
        )
        return CategoryResult(
            category_id=category.id,
            status=STATUS_SENT,
            evaluation=evaluation,
            outcomes=outcomes,
        )


def sync_cursor_state(store: CursorStorePort, categories: Iterable[Category]) -> int:
    """Delete cursors of categories that are no longer configured.

    Called when configuration is (re)loaded, never inside a pass.
    """

    configured = {category.id for category in categories}
    stale = store.list_category_ids() - configured
    if not stale:
        return 0
    removed = store.delete_for_categories(stale)
    LOGGER.info("Removed %s cursor(s) for unconfigured categories: %s", removed, ", ".join(sorted(stale)))
    return removed


class StaticCategorySource:
    """CategorySourcePort over a fixed list of categories."""

    def __init__(self, categories: Iterable[Category]) -> None:
        self._categories = list(categories)

    def list_categories(self) -> List[Category]:
        return list(self._categories)
