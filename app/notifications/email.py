"""
Transactional email delivery.

Resend's HTTP API is used when ``RESEND_API_KEY`` is configured, SMTP
otherwise. Both raise ``EmailDeliveryError`` with ``transient`` set for
failures worth retrying.
"""
import asyncio
import smtplib
from email.message import EmailMessage as MIMEMessage
from typing import Optional, Protocol

import httpx

from app.core.config import settings
from app.core.errors import EmailDeliveryError
from app.core.logging import logger
from app.notifications.templates import EmailMessage

RESEND_API_URL = "https://api.resend.com/emails"


class EmailSender(Protocol):
    async def send(self, message: EmailMessage) -> Optional[str]:
        ...


class ResendEmailSender:
    def __init__(self, api_key: str, from_address: str, timeout: float = None):
        self.api_key = api_key
        self.from_address = from_address
        self.timeout = timeout or settings.NOTIFICATION_TIMEOUT_SECONDS

    async def send(self, message: EmailMessage) -> Optional[str]:
        payload = {
            "from": self.from_address,
            "to": [message.to_address],
            "subject": message.subject,
            "text": message.text_body,
        }
        if message.reply_to:
            payload["reply_to"] = message.reply_to

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    RESEND_API_URL,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json=payload,
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise EmailDeliveryError(
                f"Resend rejected email to {message.to_address}: HTTP {status}",
                transient=status >= 500 or status == 429,
            ) from e
        except httpx.TransportError as e:
            raise EmailDeliveryError(f"Resend unreachable: {e}", transient=True) from e

        email_id = response.json().get("id")
        logger.info(f"Email '{message.subject}' sent to {message.to_address} via Resend (id={email_id})")
        return email_id


class SMTPEmailSender:
    def __init__(
        self,
        host: str,
        port: int,
        username: str = "",
        password: str = "",
        from_address: str = "",
        timeout: float = None,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_address = from_address
        self.timeout = timeout or settings.NOTIFICATION_TIMEOUT_SECONDS

    def _build(self, message: EmailMessage) -> MIMEMessage:
        msg = MIMEMessage()
        msg["Subject"] = message.subject
        msg["From"] = self.from_address
        msg["To"] = message.to_address
        if message.reply_to:
            msg["Reply-To"] = message.reply_to
        msg.set_content(message.text_body)
        return msg

    def _send(self, msg: MIMEMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.username and self.password:
                server.starttls()
                server.login(self.username, self.password)
            server.send_message(msg)

    async def send(self, message: EmailMessage) -> Optional[str]:
        try:
            await asyncio.to_thread(self._send, self._build(message))
        except smtplib.SMTPAuthenticationError as e:
            raise EmailDeliveryError(f"SMTP authentication failed: {e}") from e
        except smtplib.SMTPRecipientsRefused as e:
            raise EmailDeliveryError(f"SMTP refused recipient {message.to_address}") from e
        except (smtplib.SMTPException, OSError) as e:
            raise EmailDeliveryError(f"SMTP delivery failed: {e}", transient=True) from e

        logger.info(f"Email '{message.subject}' sent to {message.to_address} via SMTP")
        return None


def get_email_sender() -> EmailSender:
    if settings.RESEND_API_KEY:
        return ResendEmailSender(settings.RESEND_API_KEY, settings.EMAILS_FROM)
    return SMTPEmailSender(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USER,
        password=settings.SMTP_PASSWORD,
        from_address=settings.EMAILS_FROM,
    )
