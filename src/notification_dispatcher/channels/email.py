"""
Notification Dispatcher - Email Channel.

SMTP delivery via aiosmtplib with multipart plain/HTML bodies, file
attachments and header injection protection.
"""
from __future__ import annotations

import asyncio
import html
import mimetypes
import re
from collections.abc import Callable
from email import encoders
from email.header import Header
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid, parseaddr
from pathlib import Path
from typing import Any

import aiosmtplib
import structlog

from ..config import EmailSettings
from ..domain.channels import ChannelAdapter, ChannelTimeoutError, DeliveryError
from ..domain.message import NotificationMessage
from ..domain.response import NotificationResponse

logger = structlog.get_logger(__name__)


# Pattern for detecting header injection attempts (newlines and control characters)
_HEADER_INJECTION_PATTERN = re.compile(r"[\r\n\x00\x0b\x0c]")
_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _sanitize_header(value: str, max_length: int = 998) -> str:
    """
    Sanitize a string for safe use in email headers.

    Args:
        value: The header value to sanitize.
        max_length: Maximum length for the header value (RFC 5322 recommends 998).

    Returns:
        Sanitized string safe for use in email headers.
    """
    if not value:
        return ""
    sanitized = _HEADER_INJECTION_PATTERN.sub("", value)
    return sanitized[:max_length].strip()


def build_html_body(message: NotificationMessage) -> str:
    """Render the HTML alternative: title, body and an optional details list."""
    parts = [f"<h2>{html.escape(message.title)}</h2><p>{html.escape(message.body)}</p>"]
    items = message.data_items()
    if items:
        parts.append("<hr><h3>Additional Information:</h3><ul>")
        for key, value in items:
            parts.append(f"<li><strong>{html.escape(key)}:</strong> {html.escape(value)}</li>")
        parts.append("</ul>")
    return "".join(parts)


SMTPFactory = Callable[..., Any]


class EmailChannel(ChannelAdapter):
    """Email notification channel using SMTP."""
    label = "Email"
    invalid_recipient_message = "Invalid email address"

    def __init__(self, config: EmailSettings, smtp_factory: SMTPFactory | None = None) -> None:
        self._config = config
        self._smtp_factory = smtp_factory

    @property
    def name(self) -> str:
        return "email"

    def is_configured(self) -> bool:
        return bool(self._config.username and self._config.password)

    def validate_recipient(self, recipient: str) -> bool:
        if not recipient or len(recipient) > 254:  # RFC 5321 max length
            return False
        return _EMAIL_PATTERN.match(recipient) is not None

    @property
    def sender(self) -> str:
        return self._config.from_address or self._config.username

    async def _build_message(self, recipient: str, message: NotificationMessage) -> MIMEMultipart:
        """Build the MIME message with sanitized headers."""
        from_name, from_address = parseaddr(_sanitize_header(self.sender))
        domain = from_address.rpartition("@")[2] or None

        mime = MIMEMultipart("mixed")
        mime["Subject"] = Header(_sanitize_header(message.title, max_length=200), "utf-8")
        mime["From"] = formataddr((from_name, from_address))
        mime["To"] = _sanitize_header(recipient)
        mime["Message-ID"] = make_msgid(domain=domain)

        body = MIMEMultipart("alternative")
        body.attach(MIMEText(message.body, "plain", "utf-8"))
        body.attach(MIMEText(build_html_body(message), "html", "utf-8"))
        mime.attach(body)

        for reference in message.attachments or []:
            mime.attach(await _load_attachment(reference))
        logger.debug("email_message_built", recipient=recipient,
                     attachments=len(message.attachments or []))
        return mime

    async def _deliver(
        self,
        recipient: str,
        message: NotificationMessage,
        timeout: float | None,
    ) -> NotificationResponse:
        """Send email via SMTP."""
        mime = await self._build_message(recipient, message)
        factory = self._smtp_factory or aiosmtplib.SMTP
        effective_timeout = timeout if timeout is not None else self._config.timeout_seconds

        try:
            async with factory(
                hostname=self._config.host,
                port=self._config.port,
                use_tls=self._config.secure,
                timeout=effective_timeout,
            ) as smtp:
                await smtp.login(self._config.username, self._config.password)
                errors, server_reply = await smtp.send_message(mime)
        except aiosmtplib.SMTPTimeoutError as e:
            raise ChannelTimeoutError(
                self.name, "Email request timed out", {"timeout": effective_timeout},
            ) from e
        except aiosmtplib.SMTPException as e:
            raise DeliveryError(self.name, str(e) or type(e).__name__,
                                {"error": type(e).__name__}) from e

        return self._success(
            mime["Message-ID"],
            {"response": server_reply, "rejected": {k: str(v) for k, v in (errors or {}).items()}},
        )


async def _load_attachment(reference: str) -> MIMEBase:
    """Read a file reference into a MIME attachment part off the event loop."""
    path = Path(reference)
    try:
        payload = await asyncio.to_thread(path.read_bytes)
    except OSError as e:
        raise DeliveryError("email", f"Cannot read attachment {reference}: {e.strerror or e}",
                            {"attachment": reference}) from e
    content_type, _ = mimetypes.guess_type(path.name)
    maintype, _, subtype = (content_type or "application/octet-stream").partition("/")
    part = MIMEBase(maintype, subtype)
    part.set_payload(payload)
    encoders.encode_base64(part)
    part.add_header("Content-Disposition", "attachment", filename=path.name)
    return part
