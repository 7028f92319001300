"""
Notification Dispatcher - Slack Channel.

Posts Block Kit messages through the Slack Web API ``chat.postMessage``.
"""
from __future__ import annotations

import re
from typing import Any

import httpx

from ..config import SlackSettings
from ..domain.channels import DeliveryError, HttpChannelAdapter
from ..domain.message import NotificationMessage
from ..domain.response import NotificationResponse

_SLACK_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


def build_blocks(message: NotificationMessage) -> list[dict[str, Any]]:
    """Header, body section and, when data is present, a fields section."""
    blocks: list[dict[str, Any]] = [
        {"type": "header", "text": {"type": "plain_text", "text": message.title}},
        {"type": "section", "text": {"type": "mrkdwn", "text": message.body}},
    ]
    items = message.data_items()
    if items:
        blocks.append({
            "type": "section",
            "fields": [{"type": "mrkdwn", "text": f"*{key}:*\n{value}"} for key, value in items],
        })
    return blocks


class SlackChannel(HttpChannelAdapter):
    """Slack notification channel (bot token)."""
    label = "Slack"
    invalid_recipient_message = "Invalid Slack recipient (use #channel or @user)"

    def __init__(self, config: SlackSettings, client: httpx.AsyncClient | None = None) -> None:
        super().__init__(client, timeout_seconds=config.timeout_seconds)
        self._config = config

    @property
    def name(self) -> str:
        return "slack"

    def is_configured(self) -> bool:
        return bool(self._config.bot_token)

    def validate_recipient(self, recipient: str) -> bool:
        if not recipient:
            return False
        return recipient[0] in "#@" or _SLACK_ID_PATTERN.match(recipient) is not None

    async def _deliver(
        self,
        recipient: str,
        message: NotificationMessage,
        timeout: float | None,
    ) -> NotificationResponse:
        response = await self._request(
            "POST",
            f"{self._config.api_base_url.rstrip('/')}/chat.postMessage",
            headers={"Authorization": f"Bearer {self._config.bot_token}"},
            json={"channel": recipient, "text": message.title, "blocks": build_blocks(message)},
            timeout=timeout,
        )
        data = response.json()
        # Slack reports API errors with HTTP 200 and ok=false
        if not data.get("ok"):
            error = data.get("error") or "unknown_error"
            raise DeliveryError(self.name, f"Slack API error: {error}", {"error": error})
        return self._success(data.get("ts"), {"channel": data.get("channel")})
