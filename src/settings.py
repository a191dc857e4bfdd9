"""Static configuration for nudger.

All user-editable settings (site, categories, scheduler, mail, logging) live
in a single JSON file for quick edits without touching Python.
"""

import json
import os

from dotenv import load_dotenv

from core.categories import build_categories
from core.config import MailConfig, SchedulerConfig
from core.scheduling import parse_run_time

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# .env carries secrets (SMTP_PASSWORD) and the optional config path override.
load_dotenv()

# config.json sits at the project root unless NUDGER_CONFIG points elsewhere.
CONFIG_PATH = os.getenv("NUDGER_CONFIG") or os.path.join(PROJECT_ROOT, "config.json")


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _resolve_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Where to store the cursor SQLite database.
_database = _CONFIG.get("database", {})
DB_PATH = _resolve_path(_database.get("path", os.path.join("src", "nudger.db")))

# The site's content database is only ever read; base_url builds canonical links.
_site = _CONFIG.get("site", {})
SITE_DB_PATH = _resolve_path(_site.get("database", "site.db"))
SITE_BASE_URL = _site.get("base_url", "http://localhost")
DEFAULT_LANGUAGE = _site.get("default_language", "en")

# Categories are validated at startup so a typo fails fast; the running
# trigger re-reads them from CONFIG_PATH on every pass.
CATEGORIES = build_categories(_CONFIG.get("categories", []))

# Daily gate for the periodic trigger.
# - run_time: "HH:MM" in the site time zone
# - timezone: IANA name, empty for the host's local zone
# - misfire_grace_seconds: how late a daily run may still start after a missed fire time
_scheduler = _CONFIG.get("scheduler", {})
SCHEDULER = SchedulerConfig(
    run_time=parse_run_time(_scheduler.get("run_time", "00:00")),
    timezone=_scheduler.get("timezone") or None,
    misfire_grace_seconds=int(_scheduler.get("misfire_grace_seconds", 3600)),
)

# Mail method switches adapters without changing core logic.
_mail = _CONFIG.get("mail", {})
MAIL = MailConfig(
    method=_mail.get("method", "log"),
    host=_mail.get("host", "localhost"),
    port=int(_mail.get("port", 587)),
    security=_mail.get("security", "starttls"),
    username=_mail.get("username") or None,
    from_address=_mail.get("from_address", "nudger@localhost"),
    timeout=int(_mail.get("timeout", 30)),
    html=bool(_mail.get("html", False)),
)

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
