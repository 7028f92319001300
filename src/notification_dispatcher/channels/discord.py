"""
Notification Dispatcher - Discord Channel.

Delivers embeds through the Discord REST API as a bot. Numeric recipients are
user ids (direct message); anything else is a text channel name looked up in
the configured guild, or the bot's first guild when none is configured.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx
import structlog

from ..config import DiscordSettings
from ..domain.channels import DeliveryError, HttpChannelAdapter
from ..domain.message import NotificationMessage
from ..domain.response import NotificationResponse

logger = structlog.get_logger(__name__)

EMBED_COLOR = 0x5865F2
GUILD_TEXT_CHANNEL = 0


def build_embed(message: NotificationMessage) -> dict[str, Any]:
    embed: dict[str, Any] = {
        "title": message.title,
        "description": message.body,
        "color": EMBED_COLOR,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    items = message.data_items()
    if items:
        embed["fields"] = [{"name": key, "value": value, "inline": True} for key, value in items]
    return embed


class DiscordChannel(HttpChannelAdapter):
    """Discord notification channel (bot token)."""
    label = "Discord"
    invalid_recipient_message = "Invalid Discord recipient"

    def __init__(self, config: DiscordSettings, client: httpx.AsyncClient | None = None) -> None:
        super().__init__(client, timeout_seconds=config.timeout_seconds)
        self._config = config

    @property
    def name(self) -> str:
        return "discord"

    def is_configured(self) -> bool:
        return bool(self._config.bot_token)

    def validate_recipient(self, recipient: str) -> bool:
        return bool(recipient and recipient.strip())

    def _url(self, path: str) -> str:
        return f"{self._config.api_base_url.rstrip('/')}{path}"

    async def _call(
        self,
        method: str,
        path: str,
        timeout: float | None,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        response = await self._request(
            method,
            self._url(path),
            headers={"Authorization": f"Bot {self._config.bot_token}"},
            json=payload,
            timeout=timeout,
        )
        return response.json()

    async def _resolve_guild_id(self, timeout: float | None) -> str | None:
        if self._config.guild_id:
            return self._config.guild_id
        guilds = await self._call("GET", "/users/@me/guilds", timeout)
        return str(guilds[0]["id"]) if guilds else None

    async def _deliver(
        self,
        recipient: str,
        message: NotificationMessage,
        timeout: float | None,
    ) -> NotificationResponse:
        payload = {"embeds": [build_embed(message)]}

        if recipient.isdigit():
            dm_channel = await self._call("POST", "/users/@me/channels", timeout,
                                          {"recipient_id": recipient})
            sent = await self._call("POST", f"/channels/{dm_channel['id']}/messages", timeout, payload)
            return self._success(str(sent["id"]), {"channel_id": dm_channel["id"]})

        guild_id = await self._resolve_guild_id(timeout)
        if guild_id is None:
            raise DeliveryError(self.name, "No guild found")

        channel_name = recipient.lstrip("#")
        channels = await self._call("GET", f"/guilds/{guild_id}/channels", timeout)
        target = next(
            (c for c in channels if c.get("type") == GUILD_TEXT_CHANNEL and c.get("name") == channel_name),
            None,
        )
        if target is None:
            raise DeliveryError(self.name, f"Channel {recipient} not found", {"guild_id": guild_id})

        logger.debug("discord_channel_resolved", channel=channel_name, channel_id=target["id"])
        sent = await self._call("POST", f"/channels/{target['id']}/messages", timeout, payload)
        return self._success(str(sent["id"]), {"channel_id": target["id"], "guild_id": guild_id})
