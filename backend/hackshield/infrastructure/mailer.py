"""Mailer — SMTP delivery for credentials, invitations and broadcast notifications.

Invariants:
    - send() never raises on delivery failure: failures are logged and reported as False
    - Blocking smtplib calls run in a worker thread (asyncio.to_thread)
    - Empty smtp_host → log-only mode (returns True without network IO)

Design Decisions:
    - smtplib + EmailMessage over a third-party client: mail volume is tiny
      (per-team credential emails, occasional broadcasts)
    - Mail failures must not fail the request that triggered them: the record of
      credentials/notifications is already committed
"""

import asyncio
import logging
import smtplib
import ssl
from email.message import EmailMessage

from hackshield.config import Settings, get_settings

logger = logging.getLogger(__name__)


class Mailer:
    def __init__(self, settings: Settings):
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.user = settings.smtp_user
        self.password = settings.smtp_password
        self.sender = settings.smtp_from
        self.use_ssl = settings.smtp_use_ssl

    @property
    def enabled(self) -> bool:
        return bool(self.host)

    async def send(
        self, to: list[str], subject: str, body: str, html: str | None = None,
    ) -> bool:
        recipients = [addr for addr in dict.fromkeys(to) if addr]
        if not recipients:
            return False
        if not self.enabled:
            logger.info(f"SMTP disabled, not sending '{subject}' to {len(recipients)} recipient(s)")
            return True
        message = self._build(recipients, subject, body, html)
        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send '{subject}': {e}")
            return False
        logger.info(f"Sent '{subject}' to {len(recipients)} recipient(s)")
        return True

    def _build(
        self, recipients: list[str], subject: str, body: str, html: str | None,
    ) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = ", ".join(recipients)
        message["Subject"] = subject
        message.set_content(body)
        if html:
            message.add_alternative(html, subtype="html")
        return message

    def _deliver(self, message: EmailMessage) -> None:
        context = ssl.create_default_context()
        if self.use_ssl:
            with smtplib.SMTP_SSL(self.host, self.port, context=context) as smtp:
                self._login_and_send(smtp, message)
        else:
            with smtplib.SMTP(self.host, self.port) as smtp:
                smtp.starttls(context=context)
                self._login_and_send(smtp, message)

    def _login_and_send(self, smtp: smtplib.SMTP, message: EmailMessage) -> None:
        if self.user:
            smtp.login(self.user, self.password)
        smtp.send_message(message)


_mailer: Mailer | None = None


def get_mailer() -> Mailer:
    """FastAPI dependency; tests override it with a recording fake."""
    global _mailer
    if _mailer is None:
        _mailer = Mailer(get_settings())
    return _mailer
