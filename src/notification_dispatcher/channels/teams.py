"""
Notification Dispatcher - Microsoft Teams Channel.

Posts Adaptive Cards to a Teams incoming webhook. The webhook fixes the
destination, so the recipient argument is accepted as-is.
"""
from __future__ import annotations

import time
from typing import Any

import httpx

from ..config import TeamsSettings
from ..domain.channels import HttpChannelAdapter
from ..domain.message import NotificationMessage
from ..domain.response import NotificationResponse


def build_adaptive_card(message: NotificationMessage) -> dict[str, Any]:
    body: list[dict[str, Any]] = [
        {"type": "TextBlock", "text": message.title, "size": "Large", "weight": "Bolder"},
        {"type": "TextBlock", "text": message.body, "wrap": True},
    ]
    items = message.data_items()
    if items:
        body.append({"type": "FactSet", "facts": [{"title": k, "value": v} for k, v in items]})

    return {
        "type": "message",
        "attachments": [
            {
                "contentType": "application/vnd.microsoft.card.adaptive",
                "content": {
                    "type": "AdaptiveCard",
                    "$schema": "http://adaptivecards.io/schemas/adaptive-card.json",
                    "version": "1.4",
                    "body": body,
                },
            }
        ],
    }


class TeamsChannel(HttpChannelAdapter):
    """Microsoft Teams notification channel using webhook."""
    label = "Teams"

    def __init__(self, config: TeamsSettings, client: httpx.AsyncClient | None = None) -> None:
        super().__init__(client, timeout_seconds=config.timeout_seconds)
        self._config = config

    @property
    def name(self) -> str:
        return "teams"

    def is_configured(self) -> bool:
        return bool(self._config.webhook_url)

    def validate_recipient(self, recipient: str) -> bool:
        return True

    async def _deliver(
        self,
        recipient: str,
        message: NotificationMessage,
        timeout: float | None,
    ) -> NotificationResponse:
        response = await self._request(
            "POST", self._config.webhook_url, json=build_adaptive_card(message), timeout=timeout,
        )
        # Webhooks return no message id
        return self._success(f"teams_{int(time.time() * 1000)}", {"status": response.status_code})
