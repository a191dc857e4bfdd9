"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any storage or mail specific types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

SORT_ASC = "ASC"
SORT_DESC = "DESC"
SORT_ORDERS = (SORT_ASC, SORT_DESC)

KIND_CONTENT_TYPE = "content_type"
KIND_VOCABULARY = "vocabulary"
CATEGORY_KINDS = (KIND_CONTENT_TYPE, KIND_VOCABULARY)

SECONDS_PER_DAY = 86400


@dataclass(frozen=True)
class Category:
    """A configured group of items sharing notification settings."""

    id: str
    kind: str
    sort_order: str
    interval_days: int
    recipients: Tuple[str, ...]
    template: str

    @property
    def interval_seconds(self) -> int:
        return self.interval_days * SECONDS_PER_DAY


@dataclass(frozen=True)
class Cursor:
    """Durable pointer to the last notified item of a category."""

    category_id: str
    last_item_id: Optional[int]
    last_timestamp: Optional[int]


@dataclass(frozen=True)
class Item:
    """Read-only view of a published entity (node or taxonomy term)."""

    id: int
    category_id: str
    published: bool
    title: str
    url: str


@dataclass(frozen=True)
class NotificationOutcome:
    """Result of sending one notification to one recipient."""

    recipient: str
    success: bool
    error: Optional[str] = None


# Evaluation reasons, kept as plain strings for log readability.
REASON_COLD_START = "cold_start"
REASON_DUE = "due"
REASON_BYPASS = "bypass"
REASON_NOT_DUE = "not_due"
REASON_EXHAUSTED = "exhausted"
REASON_EMPTY = "empty"


@dataclass(frozen=True)
class Evaluation:
    """Decision for one category in one pass."""

    eligible: bool
    candidate: Optional[Item]
    reason: str


STATUS_SENT = "sent"
STATUS_SKIPPED = "skipped"
STATUS_ERROR = "error"


@dataclass
class CategoryResult:
    """Per-category report produced by a notification pass."""

    category_id: str
    status: str
    evaluation: Optional[Evaluation] = None
    outcomes: list[NotificationOutcome] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def delivered(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)
