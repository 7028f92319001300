"""
Notification Dispatcher - Dispatch Service.

Routes channel-agnostic messages to the registered channel adapter and
normalizes every outcome into a NotificationResponse.

Architecture Layer: Domain
Principles: Facade Pattern, Registry, Async Processing
"""
from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING

import structlog

from .channels import ChannelAdapter, ChannelRegistry, is_adapter_configured
from .message import NotificationMessage
from .response import NotificationResponse

if TYPE_CHECKING:
    from ..config import NotificationDispatcherConfig

logger = structlog.get_logger(__name__)


class NotificationService:
    """
    Core dispatch service over a registry of channel adapters.

    Every public send operation returns responses; unregistered channels,
    unconfigured channels, timeouts and adapter faults all come back as
    failure responses.
    """
    def __init__(self, channel_registry: ChannelRegistry | None = None) -> None:
        self._channels = channel_registry if channel_registry is not None else ChannelRegistry()
        logger.info("notification_service_initialized", channels=self._channels.list_channels())

    @property
    def registry(self) -> ChannelRegistry:
        return self._channels

    def register_channel(self, channel: ChannelAdapter) -> None:
        """Register a custom channel, replacing a built-in one with the same name."""
        self._channels.register_channel(channel)

    async def send(
        self,
        recipient: str,
        message: NotificationMessage,
        channel: str,
        *,
        timeout: float | None = None,
    ) -> NotificationResponse:
        """
        Send a notification through a specific channel.

        Args:
            recipient: Channel-specific recipient address
            message: Message to deliver
            channel: Registered channel name
            timeout: Optional bound in seconds on the adapter call

        Returns:
            The adapter's response, or a failure response for routing errors
        """
        adapter = self._channels.get_channel(channel)
        if adapter is None:
            available = self._channels.list_channels()
            logger.warning("notification_channel_not_registered",
                           channel=channel, available_channels=available)
            return NotificationResponse.failed(
                f"Channel '{channel}' is not registered",
                {"available_channels": available},
            )

        try:
            if not adapter.is_configured():
                logger.warning("notification_channel_not_configured", channel=channel)
                return NotificationResponse.failed(
                    f"Channel '{channel}' is not properly configured", {}, channel,
                )
            if timeout is None:
                return await adapter.send(recipient, message)
            return await asyncio.wait_for(
                adapter.send(recipient, message, timeout=timeout), timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("notification_send_timeout", channel=channel, timeout=timeout)
            return NotificationResponse.failed(
                f"Channel '{channel}' timed out after {timeout}s", {"timeout": timeout}, channel,
            )
        except Exception as e:
            logger.error("notification_send_exception",
                         channel=channel, error_type=type(e).__name__, error=str(e))
            return NotificationResponse.failed(
                str(e) or type(e).__name__, {"error": type(e).__name__}, channel,
            )

    async def send_to_many(
        self,
        recipients: Sequence[str],
        message: NotificationMessage,
        channel: str,
        *,
        timeout: float | None = None,
    ) -> list[NotificationResponse]:
        """Send the same message to several recipients on one channel, in input order."""
        results = await asyncio.gather(
            *(self.send(recipient, message, channel, timeout=timeout) for recipient in recipients)
        )
        successful = sum(1 for r in results if r.is_success())
        logger.info("notification_batch_completed", channel=channel,
                    total=len(results), successful=successful, failed=len(results) - successful)
        return list(results)

    async def send_to_multiple_channels(
        self,
        recipient: str,
        message: NotificationMessage,
        channels: Sequence[str],
        *,
        timeout: float | None = None,
    ) -> dict[str, NotificationResponse]:
        """Send one message to one recipient through several channels."""
        names = list(dict.fromkeys(channels))
        results = await asyncio.gather(
            *(self.send(recipient, message, name, timeout=timeout) for name in names)
        )
        logger.info("notification_multi_channel_completed", channels=names,
                    successful=[n for n, r in zip(names, results) if r.is_success()])
        return dict(zip(names, results))

    def get_available_channels(self) -> list[str]:
        """Get all registered channel names."""
        return self._channels.list_channels()

    def get_configured_channels(self) -> list[str]:
        """Get registered channel names whose adapter is currently configured."""
        return [
            name for name, adapter in self._channels.snapshot().items() if is_adapter_configured(adapter)
        ]

    def has_channel(self, channel: str) -> bool:
        return channel in self._channels

    async def aclose(self) -> None:
        """Release channel transport resources."""
        await self._channels.aclose()
        logger.info("notification_service_closed")


def create_notification_service(config: NotificationDispatcherConfig) -> NotificationService:
    """
    Factory function to create a configured NotificationService.

    Registers one adapter per configuration group present in ``config``:
    email → ``email``; twilio → ``sms``, ``whatsapp``, ``voice``; and the
    chat/webhook groups under their own names.

    Args:
        config: Dispatcher configuration

    Returns:
        Ready NotificationService instance
    """
    from ..channels import (
        DiscordChannel,
        EmailChannel,
        MessengerChannel,
        SlackChannel,
        SMSChannel,
        TeamsChannel,
        TelegramChannel,
        VoiceChannel,
        WhatsAppChannel,
    )

    registry = ChannelRegistry()

    if config.email is not None:
        registry.register_channel(EmailChannel(config.email))

    if config.twilio is not None:
        registry.register_channel(SMSChannel(config.twilio))
        registry.register_channel(WhatsAppChannel(config.twilio))
        registry.register_channel(VoiceChannel(config.twilio))

    if config.slack is not None:
        registry.register_channel(SlackChannel(config.slack))

    if config.discord is not None:
        registry.register_channel(DiscordChannel(config.discord))

    if config.teams is not None:
        registry.register_channel(TeamsChannel(config.teams))

    if config.telegram is not None:
        registry.register_channel(TelegramChannel(config.telegram))

    if config.messenger is not None:
        registry.register_channel(MessengerChannel(config.messenger))

    if not len(registry):
        logger.warning("notification_no_channels_configured")

    return NotificationService(registry)


ConfigFactory = Callable[
    [], "NotificationDispatcherConfig | Awaitable[NotificationDispatcherConfig]"
]


async def create_notification_service_async(config_factory: ConfigFactory) -> NotificationService:
    """
    Resolve configuration from a sync or async factory, then build the service.

    The returned service is fully wired; nothing is deferred to first use.
    """
    config = config_factory()
    if inspect.isawaitable(config):
        config = await config
    return create_notification_service(config)
