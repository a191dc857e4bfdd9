"""Notification composition and per-recipient delivery (core domain)."""

from __future__ import annotations

import logging
import re
from typing import Iterable, List

from core.errors import DeliveryError
from core.models import Item, NotificationOutcome
from core.ports import MailPort

LOGGER = logging.getLogger(__name__)

TOKEN_TITLE = "[entity-title]"
TOKEN_URL = "[entity-url]"
SUBJECT_FORMAT = "Entity Update Notification: {title}"

_TOKEN_PATTERN = re.compile("|".join(re.escape(token) for token in (TOKEN_TITLE, TOKEN_URL)))
_LINE_BREAKS = re.compile(r"\s*[\r\n]+\s*")


def render_body(template: str, item: Item) -> str:
    """Replace the entity tokens in a single pass.

    Substituted values are never rescanned, so a title that itself contains
    "[entity-url]" is inserted literally.
    """

    tokens = {TOKEN_TITLE: item.title, TOKEN_URL: item.url}
    return _TOKEN_PATTERN.sub(lambda match: tokens[match.group(0)], template)


def format_subject(item: Item) -> str:
    # Header values may not contain line breaks; multi-line titles are folded.
    title = _LINE_BREAKS.sub(" ", item.title).strip()
    return SUBJECT_FORMAT.format(title=title)


class NotificationDispatcher:
    """Sends one notification per recipient, never letting one failure block the rest."""

    def __init__(self, mail: MailPort, language_code: str = "en") -> None:
        self._mail = mail
        self._language_code = language_code

    def send(self, item: Item, recipients: Iterable[str], template: str) -> List[NotificationOutcome]:
        """Deliver the rendered notification to every recipient and report each result."""

        subject = format_subject(item)
        body = render_body(template, item)

        outcomes: List[NotificationOutcome] = []
        for to in recipients:
            try:
                accepted = self._mail.send(to, subject, body, self._language_code)
            except DeliveryError as exc:
                LOGGER.error("Sending update email for %r to %s failed: %s", item.title, to, exc)
                outcomes.append(NotificationOutcome(recipient=to, success=False, error=str(exc)))
                continue

            if accepted:
                LOGGER.info("Email has been sent for entity: %s (to %s)", item.title, to)
                outcomes.append(NotificationOutcome(recipient=to, success=True))
            else:
                LOGGER.error("There was a problem sending the update email for %r to %s", item.title, to)
                outcomes.append(
                    NotificationOutcome(recipient=to, success=False, error="rejected by mail transport")
                )
        return outcomes
