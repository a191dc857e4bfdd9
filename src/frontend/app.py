"""Main Textual app for the nudger status panel."""

from __future__ import annotations

import time
from typing import Any, List, Optional

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Button, DataTable, Footer, Static

from core.errors import NudgerError
from core.models import STATUS_ERROR, STATUS_SENT, CategoryResult
from core.ports import CategorySourcePort, CursorStorePort
from core.processor import NotificationPass, sync_cursor_state

from .constants import NUDGER_GREEN, STATUS_COLUMNS
from .modals import SendNowConfirmScreen
from .state import build_status_rows

PASS_WORKER_GROUP = "notification-pass"


class StatusPanelApp(App):
    """Category/cursor overview with the two manual triggers."""

    BINDINGS = [
        ("s", "send", "Send"),
        ("n", "send_now", "Send now"),
        ("ctrl+r", "reload", "Reload"),
        ("q", "quit", "Quit"),
    ]

    CSS = """
    Screen {
        background: #101a16;
        color: #e8f5ee;
    }

    #header {
        height: 7;
        padding: 1 4;
        border-bottom: solid #2a463a;
    }

    #header-left, #header-right {
        width: 1fr;
    }

    #header-right {
        text-align: right;
    }

    #title {
        text-style: bold;
    }

    .subtle {
        color: #c6ddd2;
    }

    #status-table {
        height: 1fr;
        margin: 1 4;
    }

    #panel-status.status-error {
        color: #ff6b6b;
    }

    .modal-dialog {
        width: 60;
        height: auto;
        padding: 1 2;
        border: thick #2a463a;
        background: #16241e;
    }
    """

    def __init__(
        self,
        categories: CategorySourcePort,
        store: CursorStorePort,
        notification_pass: NotificationPass,
        tz_name: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._categories = categories
        self._store = store
        self._pass = notification_pass
        self._tz_name = tz_name

    def compose(self) -> ComposeResult:
        with Container(id="header"):
            with Horizontal(id="header-row"):
                with Vertical(id="header-left"):
                    yield Static(self._title_text(), id="title")
                    yield Static("", id="panel-status", classes="subtle")
                with Vertical(id="header-right"):
                    yield Horizontal(
                        Button("Send", id="send-btn"),
                        Button("Send now", id="send-now-btn", variant="warning"),
                        Button("Reload", id="reload-btn"),
                        id="header-actions",
                    )
        yield DataTable(id="status-table", cursor_type="row", zebra_stripes=True)
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#status-table", DataTable)
        table.add_columns(*STATUS_COLUMNS)
        self.action_reload()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            self.action_send()
        elif event.button.id == "send-now-btn":
            self.action_send_now()
        elif event.button.id == "reload-btn":
            self.action_reload()

    def action_reload(self) -> None:
        try:
            categories = self._categories.list_categories()
            sync_cursor_state(self._store, categories)
            rows = build_status_rows(categories, self._store, int(time.time()), self._tz_name)
        except NudgerError as exc:
            self._set_status(str(exc), error=True)
            return
        table = self.query_one("#status-table", DataTable)
        table.clear()
        for row in rows:
            table.add_row(*row.as_cells(), key=row.category_id)
        self._set_status(f"{len(rows)} categories loaded")

    def action_send(self) -> None:
        self._run_pass(bypass_interval=False)

    def action_send_now(self) -> None:
        # Bypassing the interval can re-notify every category at once; confirm first.
        self.push_screen(SendNowConfirmScreen(), self._handle_send_now_choice)

    def _handle_send_now_choice(self, confirmed: Optional[bool]) -> None:
        if confirmed:
            self._run_pass(bypass_interval=True)

    def _run_pass(self, bypass_interval: bool) -> None:
        # SMTP round-trips block; keep them off the event loop.
        if any(worker.group == PASS_WORKER_GROUP and worker.is_running for worker in self.workers):
            self._set_status("A notification pass is already running")
            return
        self._set_status("Sending update emails...")
        self.run_worker(
            lambda: self._pass_worker(bypass_interval),
            name=PASS_WORKER_GROUP,
            group=PASS_WORKER_GROUP,
            thread=True,
        )

    def _pass_worker(self, bypass_interval: bool) -> None:
        results = self._pass.run(int(time.time()), bypass_interval=bypass_interval)
        self.call_from_thread(self._show_results, results)

    def _show_results(self, results: List[CategoryResult]) -> None:
        sent = sum(1 for result in results if result.status == STATUS_SENT)
        errors = sum(1 for result in results if result.status == STATUS_ERROR)
        self.action_reload()
        self._set_status(f"Update emails have been sent: {sent} sent, {errors} error(s)", error=bool(errors))

    def _set_status(self, message: str, error: bool = False) -> None:
        status = self.query_one("#panel-status", Static)
        status.update(message)
        status.set_class(error, "status-error")

    @staticmethod
    def _title_text() -> Text:
        return Text.assemble(
            ("NUDGER", NUDGER_GREEN),
            (" > Status Panel", "bold"),
        )
