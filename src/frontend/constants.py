"""Shared constants for the Textual UI."""

from __future__ import annotations

NUDGER_GREEN = "#3FB27F"
STATUS_COLUMNS = ("category", "kind", "order", "every", "last item", "last notified", "next due")
