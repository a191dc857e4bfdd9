"""Log-only mail transport adapter.

Writes notifications to the log instead of sending them, for dry runs and
for sites without an SMTP relay.
"""

from __future__ import annotations

import logging

LOGGER = logging.getLogger(__name__)


class LogMailTransport:
    """MailPort adapter that records messages in the log and always succeeds."""

    def send(self, to: str, subject: str, body: str, language_code: str) -> bool:
        LOGGER.info("[mail:%s] To: %s | Subject: %s\n%s", language_code, to, subject, body)
        return True
