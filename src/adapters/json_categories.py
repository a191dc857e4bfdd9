"""config.json category source adapter.

Re-reads the categories section on every call so edits to config.json take
effect on the next pass without restarting the long-running trigger.
"""

from __future__ import annotations

import json
from typing import List

from core.categories import build_categories
from core.errors import ConfigurationError
from core.models import Category


class JsonCategorySource:
    """CategorySourcePort backed by the categories list in config.json."""

    def __init__(self, config_path: str) -> None:
        self._config_path = config_path

    def list_categories(self) -> List[Category]:
        try:
            with open(self._config_path, "r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigurationError(f"Cannot read categories from {self._config_path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError("config root must be an object")
        # One bad entry must not hide the valid ones from a running pass.
        return build_categories(data.get("categories", []), strict=False)
