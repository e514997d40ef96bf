"""Outbound email. Sends are best effort: failures are logged, never raised."""
from __future__ import annotations

import asyncio
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import httpx

from ..config import Settings
from ..logging_config import logger

SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"


@dataclass(frozen=True)
class OutboundEmail:
    to: str
    subject: str
    text: str
    html: str


class EmailNotifier:
    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.settings = settings
        self._transport = transport

    @property
    def sendgrid_enabled(self) -> bool:
        return bool(self.settings.sendgrid_api_key and self.settings.sendgrid_from_email)

    @property
    def smtp_enabled(self) -> bool:
        return bool(self.settings.smtp_server and self.settings.sendgrid_from_email)

    async def send(self, message: OutboundEmail) -> None:
        if self.sendgrid_enabled:
            await self._send_sendgrid(message)
        elif self.smtp_enabled:
            await asyncio.to_thread(self._send_smtp, message)
        else:
            logger.warning("email.disabled", reason="missing configuration", subject=message.subject)

    def _sendgrid_payload(self, message: OutboundEmail) -> dict[str, object]:
        return {
            "personalizations": [{"to": [{"email": message.to}], "subject": message.subject}],
            "from": {"email": self.settings.sendgrid_from_email, "name": self.settings.sendgrid_from_name},
            "content": [
                {"type": "text/plain", "value": message.text},
                {"type": "text/html", "value": message.html},
            ],
        }

    async def _send_sendgrid(self, message: OutboundEmail) -> None:
        headers = {"Authorization": f"Bearer {self.settings.sendgrid_api_key}"}
        try:
            async with httpx.AsyncClient(
                timeout=self.settings.email_timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(SENDGRID_URL, json=self._sendgrid_payload(message), headers=headers)
        except httpx.HTTPError as exc:
            logger.error("email.failed", provider="sendgrid", error=str(exc))
            return
        if response.is_error:
            logger.error("email.failed", provider="sendgrid", status=response.status_code, body=response.text)
            return
        logger.info("email.sent", provider="sendgrid", subject=message.subject)

    def _send_smtp(self, message: OutboundEmail) -> None:
        sender = self.settings.sendgrid_from_email or ""
        mime = MIMEMultipart("alternative")
        mime["Subject"] = message.subject
        mime["From"] = f"{self.settings.sendgrid_from_name} <{sender}>"
        mime["To"] = message.to
        mime.attach(MIMEText(message.text, "plain"))
        mime.attach(MIMEText(message.html, "html"))

        try:
            with smtplib.SMTP(
                self.settings.smtp_server, self.settings.smtp_port, timeout=self.settings.email_timeout_seconds
            ) as client:
                try:
                    client.starttls()
                except smtplib.SMTPNotSupportedError:  # pragma: no cover - optional capability
                    logger.debug("smtp.no_tls")
                if self.settings.smtp_user and self.settings.smtp_pass:
                    client.login(self.settings.smtp_user, self.settings.smtp_pass)
                client.sendmail(sender, [message.to], mime.as_string())
        except (smtplib.SMTPException, OSError) as exc:  # pragma: no cover - network operation
            logger.error("email.failed", provider="smtp", error=str(exc))
            return
        logger.info("email.sent", provider="smtp", subject=message.subject)
