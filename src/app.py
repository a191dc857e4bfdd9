"""Application entry point for the nudger notifier."""

from __future__ import annotations

import argparse
import logging
import os
import time
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint

import settings
from adapters.cron_scheduler import build_scheduler
from adapters.json_categories import JsonCategorySource
from adapters.log_mail import LogMailTransport
from adapters.smtp_mail import SMTPMailTransport
from adapters.sqlite_items import build_repositories
from adapters.sqlite_storage import SQLiteCursorStore
from core.dispatcher import NotificationDispatcher
from core.due_check import DueCheckEngine
from core.errors import NudgerError
from core.models import STATUS_ERROR, STATUS_SENT, CategoryResult
from core.processor import NotificationPass, sync_cursor_state
from core.scheduling import is_run_due, to_local
from frontend.constants import STATUS_COLUMNS
from frontend.state import build_status_rows

NAME = "NUDGER"
FONT = "tarty-1"

# scheduler_state key for the daily periodic trigger.
PERIODIC_TRIGGER = "periodic"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", []):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/nudger.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _build_mail():
    # Select the mail adapter based on configuration to keep the core
    # dispatcher independent from delivery details.
    method = settings.MAIL.method
    if method == "smtp":
        password = os.getenv("SMTP_PASSWORD")
        if settings.MAIL.username and not password:
            raise RuntimeError("SMTP_PASSWORD is required when mail.username is set")
        return SMTPMailTransport(settings.MAIL, password)
    if method == "log":
        return LogMailTransport()
    raise RuntimeError("mail.method must be 'smtp' or 'log'")


def _open_store() -> SQLiteCursorStore:
    store = SQLiteCursorStore(settings.DB_PATH)
    store.init_db()
    # Cursors of categories removed from config.json are dropped on startup.
    sync_cursor_state(store, settings.CATEGORIES)
    return store


def _build_pass(store: SQLiteCursorStore, categories: JsonCategorySource) -> NotificationPass:
    engine = DueCheckEngine(store, build_repositories(settings.SITE_DB_PATH, settings.SITE_BASE_URL))
    dispatcher = NotificationDispatcher(_build_mail(), language_code=settings.DEFAULT_LANGUAGE)
    return NotificationPass(categories=categories, store=store, engine=engine, dispatcher=dispatcher)


def _print_results(results: list[CategoryResult]) -> None:
    for result in results:
        if result.status == STATUS_SENT and result.evaluation and result.evaluation.candidate:
            item = result.evaluation.candidate
            print(
                f"{result.category_id}: sent item {item.id} ({item.title}) "
                f"to {result.delivered}/{len(result.outcomes)} recipient(s)"
            )
        elif result.status == STATUS_ERROR:
            print(f"{result.category_id}: error - {result.error}")
        else:
            reason = result.evaluation.reason if result.evaluation else "skipped"
            print(f"{result.category_id}: skipped ({reason})")


def _gated_pass(
    store: SQLiteCursorStore,
    notification_pass: NotificationPass,
    now: int,
) -> Optional[list[CategoryResult]]:
    """Run a pass only if the daily run time has been reached and not yet served."""

    tz_name = settings.SCHEDULER.timezone
    last_run = store.get_last_run(PERIODIC_TRIGGER)
    last_local = to_local(last_run, tz_name) if last_run is not None else None
    if not is_run_due(to_local(now, tz_name), settings.SCHEDULER.run_time, last_local):
        logging.getLogger(__name__).debug("Periodic trigger not due yet")
        return None

    results = notification_pass.run(now, bypass_interval=False)
    store.set_last_run(PERIODIC_TRIGGER, now)
    return results


def _run() -> None:
    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)

    logger.info("Starting nudger")
    store = _open_store()
    categories = JsonCategorySource(settings.CONFIG_PATH)
    notification_pass = _build_pass(store, categories)
    logger.info(
        "%s categories loaded, daily run time %s",
        len(settings.CATEGORIES),
        settings.SCHEDULER.run_time.strftime("%H:%M"),
    )

    known_ids = {category.id for category in settings.CATEGORIES}

    def periodic_job() -> None:
        nonlocal known_ids
        try:
            current = categories.list_categories()
            current_ids = {category.id for category in current}
            # config.json changed since the last run: drop cursors of removed categories.
            if current_ids != known_ids:
                sync_cursor_state(store, current)
                known_ids = current_ids
            _gated_pass(store, notification_pass, int(time.time()))
        except NudgerError:
            logger.exception("Periodic trigger failed")

    scheduler = build_scheduler(periodic_job, settings.SCHEDULER)
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Stopping nudger")
        scheduler.shutdown(wait=False)


def _tick() -> None:
    _configure_logging()
    store = _open_store()
    notification_pass = _build_pass(store, JsonCategorySource(settings.CONFIG_PATH))
    results = _gated_pass(store, notification_pass, int(time.time()))
    if results is None:
        print("Not due yet.")
        return
    _print_results(results)


def _send(bypass_interval: bool) -> None:
    _configure_logging()
    store = _open_store()
    notification_pass = _build_pass(store, JsonCategorySource(settings.CONFIG_PATH))
    results = notification_pass.run(int(time.time()), bypass_interval=bypass_interval)
    _print_results(results)
    print("Update emails have been sent.")


def _status() -> None:
    from rich.console import Console
    from rich.table import Table

    store = _open_store()
    table = Table(title="nudger categories")
    for column in STATUS_COLUMNS:
        table.add_column(column)
    for row in build_status_rows(settings.CATEGORIES, store, int(time.time()), settings.SCHEDULER.timezone):
        table.add_row(*row.as_cells())
    Console().print(table)


def _panel() -> None:
    _print_banner()
    _configure_logging()
    from frontend.app import StatusPanelApp

    store = _open_store()
    categories = JsonCategorySource(settings.CONFIG_PATH)
    StatusPanelApp(
        categories=categories,
        store=store,
        notification_pass=_build_pass(store, categories),
        tz_name=settings.SCHEDULER.timezone,
    ).run()


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="nudger")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the daily scheduler")
    subparsers.add_parser("tick", help="Check the daily run time once (for a system crontab)")
    subparsers.add_parser("send", help="Send update emails now, respecting each category's interval")
    subparsers.add_parser("send-now", help="Send update emails now, bypassing the interval")
    subparsers.add_parser("status", help="Show categories, cursors and next due times")
    subparsers.add_parser("panel", help="Launch the status TUI")

    args = parser.parse_args(argv)
    if args.command == "tick":
        _tick()
        return
    if args.command == "send":
        _send(bypass_interval=False)
        return
    if args.command == "send-now":
        _send(bypass_interval=True)
        return
    if args.command == "status":
        _status()
        return
    if args.command == "panel":
        _panel()
        return
    _run()


if __name__ == "__main__":
    main()
