"""Ports (interfaces) used by the core scheduler.

Ports define the minimal contracts for storage, item lookup and mail adapters
so that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Protocol

from core.models import Category, Cursor, Item


class CursorStorePort(Protocol):
    """Durable per-category cursor state required by the core."""

    def get(self, category_id: str) -> Optional[Cursor]:
        ...

    def upsert(self, category_id: str, item_id: int, timestamp: int) -> None:
        ...

    def delete_for_categories(self, category_ids: Iterable[str]) -> int:
        ...

    def list_category_ids(self) -> set[str]:
        ...


class ItemRepositoryPort(Protocol):
    """Read-only lookup of published items, one implementation per category kind."""

    def find_next(self, category_id: str, sort_order: str, after_id: Optional[int]) -> Optional[Item]:
        ...

    def find_first(self, category_id: str, sort_order: str) -> Optional[Item]:
        ...


class MailPort(Protocol):
    """Mail delivery required by the dispatcher.

    Returns False when the transport rejected the message, or raises
    DeliveryError when it could not be reached.
    """

    def send(self, to: str, subject: str, body: str, language_code: str) -> bool:
        ...


class CategorySourcePort(Protocol):
    """Supplies the configured categories in configuration order."""

    def list_categories(self) -> List[Category]:
        ...
