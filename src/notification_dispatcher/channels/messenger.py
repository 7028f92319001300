"""
Notification Dispatcher - Facebook Messenger Channel.

Sends text messages to page-scoped user ids through the Graph API.
"""
from __future__ import annotations

import re

import httpx

from ..config import MessengerSettings
from ..domain.channels import HttpChannelAdapter
from ..domain.message import NotificationMessage
from ..domain.response import NotificationResponse

_USER_ID_PATTERN = re.compile(r"^\d+$")


def format_text(message: NotificationMessage) -> str:
    text = f"{message.title}\n\n{message.body}"
    items = message.data_items()
    if items:
        text += "\n\n📋 Details:"
        text += "".join(f"\n• {key}: {value}" for key, value in items)
    return text


class MessengerChannel(HttpChannelAdapter):
    """Facebook Messenger notification channel (page access token)."""
    label = "Messenger"
    invalid_recipient_message = "Invalid Facebook user ID (numeric ID required)"

    def __init__(self, config: MessengerSettings, client: httpx.AsyncClient | None = None) -> None:
        super().__init__(client, timeout_seconds=config.timeout_seconds)
        self._config = config

    @property
    def name(self) -> str:
        return "messenger"

    def is_configured(self) -> bool:
        return bool(self._config.page_access_token)

    def validate_recipient(self, recipient: str) -> bool:
        return bool(recipient) and _USER_ID_PATTERN.match(recipient) is not None

    async def _deliver(
        self,
        recipient: str,
        message: NotificationMessage,
        timeout: float | None,
    ) -> NotificationResponse:
        response = await self._request(
            "POST",
            self._config.api_url,
            params={"access_token": self._config.page_access_token},
            json={"recipient": {"id": recipient}, "message": {"text": format_text(message)}},
            timeout=timeout,
        )
        data = response.json()
        return self._success(data.get("message_id"), {"recipient_id": data.get("recipient_id")})
