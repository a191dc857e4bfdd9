"""SMTP mail transport adapter.

Delivers notification emails through an SMTP relay so the core dispatcher
stays independent from delivery details.
"""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from core.config import MailConfig
from core.errors import DeliveryError

LOGGER = logging.getLogger(__name__)


class SMTPMailTransport:
    """MailPort adapter that opens one SMTP session per message."""

    def __init__(self, config: MailConfig, password: Optional[str]) -> None:
        self._config = config
        self._password = password

    def build_message(self, to: str, subject: str, body: str, language_code: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._config.from_address
        message["To"] = to
        message["Subject"] = subject
        message["Content-Language"] = language_code
        if self._config.html:
            message.set_content(body, subtype="html")
        else:
            message.set_content(body)
        return message

    def _open(self) -> smtplib.SMTP:
        config = self._config
        if config.security == "ssl":
            return smtplib.SMTP_SSL(config.host, config.port, timeout=config.timeout)
        server = smtplib.SMTP(config.host, config.port, timeout=config.timeout)
        if config.security == "starttls":
            server.starttls()
        return server

    def send(self, to: str, subject: str, body: str, language_code: str) -> bool:
        """Send one message; False if the server refused the recipient."""

        LOGGER.debug("Connecting to SMTP server %s:%s", self._config.host, self._config.port)
        try:
            message = self.build_message(to, subject, body, language_code)
        except ValueError as exc:
            raise DeliveryError(f"Cannot build message for {to}: {exc}") from exc
        try:
            with self._open() as server:
                if self._config.username:
                    server.login(self._config.username, self._password or "")
                refused = server.send_message(message)
        except smtplib.SMTPRecipientsRefused as exc:
            LOGGER.warning("SMTP server refused %s: %s", to, exc.recipients)
            return False
        except (smtplib.SMTPException, OSError) as exc:
            raise DeliveryError(f"SMTP delivery to {to} failed: {exc}") from exc
        return to not in refused
