"""Category compilation from raw config (core domain)."""

from __future__ import annotations

import logging
from typing import Iterable, List

from core.errors import ConfigurationError
from core.models import CATEGORY_KINDS, SORT_ASC, SORT_ORDERS, Category

LOGGER = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "[entity-title] is due for an update: [entity-url]"


def _normalize_recipients(raw) -> tuple[str, ...]:
    # The settings form stored addresses as one comma-separated string; lists
    # are accepted too. Order is kept, duplicates and blanks are dropped.
    if isinstance(raw, str):
        raw = raw.split(",")
    recipients: list[str] = []
    for value in raw or []:
        address = str(value).strip()
        if address and address not in recipients:
            recipients.append(address)
    return tuple(recipients)


def build_category(entry: dict) -> Category:
    """Validate one raw category entry and return a typed Category."""

    category_id = str(entry.get("id") or "").strip()
    if not category_id:
        raise ConfigurationError("category entry is missing an id")

    kind = entry.get("kind")
    if kind not in CATEGORY_KINDS:
        raise ConfigurationError(
            f"category {category_id!r}: kind must be one of {', '.join(CATEGORY_KINDS)}"
        )

    sort_order = str(entry.get("sort_order", SORT_ASC)).upper()
    if sort_order not in SORT_ORDERS:
        raise ConfigurationError(f"category {category_id!r}: sort_order must be ASC or DESC")

    try:
        interval_days = int(entry.get("interval_days", 1))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"category {category_id!r}: interval_days must be an integer") from exc

    recipients = _normalize_recipients(entry.get("recipients"))
    if not recipients:
        raise ConfigurationError(f"category {category_id!r}: at least one recipient is required")

    return Category(
        id=category_id,
        kind=kind,
        sort_order=sort_order,
        interval_days=interval_days,
        recipients=recipients,
        template=entry.get("template") or DEFAULT_TEMPLATE,
    )


def build_categories(categories_config: Iterable[dict], strict: bool = True) -> List[Category]:
    """Normalize category configs, skipping disabled entries.

    Configuration order is preserved because the notification pass walks
    categories in the order they were configured. With ``strict=False`` an
    invalid or duplicate entry is logged and dropped instead of failing the
    whole list.
    """

    compiled: List[Category] = []
    seen_ids: set[str] = set()
    for entry in categories_config:
        try:
            if not isinstance(entry, dict):
                raise ConfigurationError(f"category entry must be an object, got {type(entry).__name__}")
            if not entry.get("enabled", True):
                continue
            category = build_category(entry)
            if category.id in seen_ids:
                raise ConfigurationError(f"duplicate category id: {category.id}")
        except ConfigurationError as exc:
            if strict:
                raise
            LOGGER.error("Skipping invalid category entry: %s", exc)
            continue
        seen_ids.add(category.id)
        compiled.append(category)
    return compiled
