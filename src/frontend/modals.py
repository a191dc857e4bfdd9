"""Modal dialogs for the Textual status panel."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Static


class SendNowConfirmScreen(ModalScreen[bool]):
    """Prompt before sending while bypassing the days setting."""

    def compose(self) -> ComposeResult:
        yield Container(
            Static("Send update emails now?", classes="modal-title"),
            Static(
                "This bypasses the configured day intervals for every category.",
                classes="modal-body",
            ),
            Horizontal(
                Button("Send now", id="send-now-confirm", variant="warning"),
                Button("Cancel", id="send-now-cancel"),
                classes="modal-actions",
            ),
            classes="modal-dialog",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "send-now-confirm")
