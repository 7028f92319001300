"""
Notification Dispatcher - Telegram Channel.

Sends MarkdownV2 messages through the Telegram Bot API ``sendMessage``.
"""
from __future__ import annotations

import re

import httpx

from ..config import TelegramSettings
from ..domain.channels import DeliveryError, HttpChannelAdapter
from ..domain.message import NotificationMessage
from ..domain.response import NotificationResponse

_USERNAME_PATTERN = re.compile(r"^@[a-zA-Z0-9_]{5,}$")
_CHAT_ID_PATTERN = re.compile(r"^-?\d+$")
_MARKDOWN_SPECIAL = re.compile(r"([_*\[\]()~`>#+\-=|{}.!\\])")


def escape_markdown(text: str) -> str:
    """Escape MarkdownV2 reserved characters."""
    return _MARKDOWN_SPECIAL.sub(r"\\\1", text)


def format_text(message: NotificationMessage) -> str:
    text = f"*{escape_markdown(message.title)}*\n\n{escape_markdown(message.body)}"
    items = message.data_items()
    if items:
        text += "\n\n_Details:_"
        text += "".join(
            f"\n• *{escape_markdown(key)}:* {escape_markdown(value)}" for key, value in items
        )
    return text


class TelegramChannel(HttpChannelAdapter):
    """Telegram notification channel (bot token)."""
    label = "Telegram"
    invalid_recipient_message = "Invalid Telegram recipient (use @username or chat_id)"

    def __init__(self, config: TelegramSettings, client: httpx.AsyncClient | None = None) -> None:
        super().__init__(client, timeout_seconds=config.timeout_seconds)
        self._config = config

    @property
    def name(self) -> str:
        return "telegram"

    def is_configured(self) -> bool:
        return bool(self._config.bot_token)

    def validate_recipient(self, recipient: str) -> bool:
        if not recipient:
            return False
        return bool(_USERNAME_PATTERN.match(recipient) or _CHAT_ID_PATTERN.match(recipient))

    async def _deliver(
        self,
        recipient: str,
        message: NotificationMessage,
        timeout: float | None,
    ) -> NotificationResponse:
        base = self._config.api_base_url.rstrip("/")
        response = await self._request(
            "POST",
            f"{base}/bot{self._config.bot_token}/sendMessage",
            json={"chat_id": recipient, "text": format_text(message), "parse_mode": "MarkdownV2"},
            timeout=timeout,
        )
        data = response.json()
        if not data.get("ok"):
            raise DeliveryError(self.name, data.get("description") or "Telegram API error",
                                {"error_code": data.get("error_code")})
        result = data["result"]
        return self._success(str(result["message_id"]), {"chat_id": result["chat"]["id"]})
