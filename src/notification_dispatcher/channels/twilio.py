"""
Notification Dispatcher - Twilio Channels.

SMS, WhatsApp and voice-call delivery through the Twilio REST API. The three
channels share one account configuration and one HTTP client style.
"""
from __future__ import annotations

import re
from typing import Any
from xml.sax.saxutils import escape

import httpx
import structlog

from ..config import TwilioSettings
from ..domain.channels import HttpChannelAdapter, PayloadTooLargeError, is_e164
from ..domain.message import NotificationMessage
from ..domain.response import NotificationResponse

logger = structlog.get_logger(__name__)

SMS_MAX_LENGTH = 1600
VOICE_MAX_LENGTH = 1000

_WHATSAPP_PATTERN = re.compile(r"^whatsapp:\+[1-9]\d{1,14}$")
_XML_ATTR_ENTITIES = {'"': "&quot;", "'": "&apos;"}


class TwilioChannel(HttpChannelAdapter):
    """Common plumbing for channels backed by a Twilio account."""
    def __init__(self, config: TwilioSettings, client: httpx.AsyncClient | None = None) -> None:
        super().__init__(client, timeout_seconds=config.timeout_seconds)
        self._config = config

    def _has_credentials(self) -> bool:
        return bool(self._config.account_sid and self._config.auth_token)

    def is_configured(self) -> bool:
        return self._has_credentials() and bool(self._config.from_number)

    def _resource_url(self, resource: str) -> str:
        base = self._config.api_base_url.rstrip("/")
        return f"{base}/Accounts/{self._config.account_sid}/{resource}.json"

    async def _create(
        self,
        resource: str,
        form: dict[str, str],
        timeout: float | None,
    ) -> dict[str, Any]:
        response = await self._request(
            "POST",
            self._resource_url(resource),
            auth=(self._config.account_sid, self._config.auth_token),
            data=form,
            timeout=timeout,
        )
        return response.json()


class SMSChannel(TwilioChannel):
    """SMS notification channel (Twilio Messages API)."""
    label = "SMS"
    invalid_recipient_message = "Invalid phone number (E.164 format required)"

    @property
    def name(self) -> str:
        return "sms"

    def validate_recipient(self, recipient: str) -> bool:
        return is_e164(recipient)

    @staticmethod
    def format_body(message: NotificationMessage) -> str:
        body = f"{message.title}\n\n{message.body}"
        items = message.data_items()
        if items:
            body += "\n\n" + "".join(f"{key}: {value}\n" for key, value in items)
        return body

    async def _deliver(
        self,
        recipient: str,
        message: NotificationMessage,
        timeout: float | None,
    ) -> NotificationResponse:
        body = self.format_body(message)
        if len(body) > SMS_MAX_LENGTH:
            raise PayloadTooLargeError(self.name, "SMS body", len(body), SMS_MAX_LENGTH)

        data = await self._create(
            "Messages",
            {"From": self._config.from_number, "To": recipient, "Body": body},
            timeout,
        )
        return self._success(
            data.get("sid"),
            {
                "status": data.get("status"),
                "date_created": data.get("date_created"),
                "segments": data.get("num_segments"),
            },
        )


class WhatsAppChannel(TwilioChannel):
    """WhatsApp notification channel (Twilio Messages API, ``whatsapp:`` addresses)."""
    label = "WhatsApp"
    invalid_recipient_message = "Invalid WhatsApp number (whatsapp:+phone format required)"

    @property
    def name(self) -> str:
        return "whatsapp"

    def is_configured(self) -> bool:
        return self._has_credentials() and bool(self._config.whatsapp_from or self._config.from_number)

    def validate_recipient(self, recipient: str) -> bool:
        return bool(recipient) and _WHATSAPP_PATTERN.match(recipient) is not None

    @property
    def sender(self) -> str:
        return self._config.whatsapp_from or f"whatsapp:{self._config.from_number}"

    @staticmethod
    def format_body(message: NotificationMessage) -> str:
        body = f"*{message.title}*\n\n{message.body}"
        items = message.data_items()
        if items:
            body += "\n\n_Details:_"
            body += "".join(f"\n• *{key}:* {value}" for key, value in items)
        return body

    async def _deliver(
        self,
        recipient: str,
        message: NotificationMessage,
        timeout: float | None,
    ) -> NotificationResponse:
        data = await self._create(
            "Messages",
            {"From": self.sender, "To": recipient, "Body": self.format_body(message)},
            timeout,
        )
        return self._success(
            data.get("sid"),
            {"status": data.get("status"), "date_created": data.get("date_created")},
        )


class VoiceChannel(TwilioChannel):
    """Voice call notification channel (Twilio Calls API with inline TwiML)."""
    label = "Voice"
    invalid_recipient_message = "Invalid phone number (E.164 format required)"

    @property
    def name(self) -> str:
        return "voice"

    def validate_recipient(self, recipient: str) -> bool:
        return is_e164(recipient)

    @staticmethod
    def format_speech(message: NotificationMessage) -> str:
        return f"{message.title}. {message.body}"

    @staticmethod
    def build_twiml(speech: str, options: dict[str, Any] | None = None) -> str:
        """Wrap the spoken text in a ``<Say>`` verb using the voice/language hints."""
        options = options or {}
        voice = escape(str(options.get("voice") or "alice"), _XML_ATTR_ENTITIES)
        language = escape(str(options.get("language") or "en-US"), _XML_ATTR_ENTITIES)
        return (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            "<Response>\n"
            f'  <Say voice="{voice}" language="{language}">{escape(speech, _XML_ATTR_ENTITIES)}</Say>\n'
            "</Response>"
        )

    async def _deliver(
        self,
        recipient: str,
        message: NotificationMessage,
        timeout: float | None,
    ) -> NotificationResponse:
        speech = self.format_speech(message)
        if len(speech) > VOICE_MAX_LENGTH:
            raise PayloadTooLargeError(self.name, "Voice message", len(speech), VOICE_MAX_LENGTH)

        data = await self._create(
            "Calls",
            {
                "To": recipient,
                "From": self._config.from_number,
                "Twiml": self.build_twiml(speech, message.options),
            },
            timeout,
        )
        logger.debug("voice_call_created", call_sid=data.get("sid"), direction=data.get("direction"))
        return self._success(
            data.get("sid"),
            {"status": data.get("status"), "direction": data.get("direction")},
        )
