"""
Notification Dispatcher - Channel Contract.

Provider-agnostic adapter contract, channel error taxonomy and the
name-keyed channel registry. Concrete adapters live in
``notification_dispatcher.channels``.

Architecture Layer: Domain
Principles: Strategy Pattern, Template Method, Dependency Inversion
"""
from __future__ import annotations

import asyncio
import re
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

import httpx
import structlog

from .message import NotificationMessage
from .response import NotificationResponse

logger = structlog.get_logger(__name__)


E164_PATTERN = re.compile(r"^\+[1-9]\d{1,14}$")


def is_e164(value: str) -> bool:
    """Check a phone number against the E.164 format (``+<country><number>``)."""
    return bool(value) and E164_PATTERN.match(value) is not None


class ChannelError(Exception):
    """Base exception for channel errors.

    Raised inside an adapter and converted into a failure response by
    :meth:`ChannelAdapter.send`; never propagated to callers.
    """
    def __init__(self, channel: str, reason: str, data: dict[str, Any] | None = None) -> None:
        self.channel = channel
        self.reason = reason
        self.data = data if data is not None else {}
        super().__init__(f"[{channel}] {reason}")


class ChannelNotConfiguredError(ChannelError):
    """Raised when an adapter lacks required credentials."""


class InvalidRecipientError(ChannelError):
    """Raised when a recipient does not match the channel's addressing syntax."""


class PayloadTooLargeError(ChannelError):
    """Raised when a rendered body exceeds the channel's size ceiling."""
    def __init__(self, channel: str, subject: str, length: int, limit: int) -> None:
        self.length = length
        self.limit = limit
        super().__init__(
            channel,
            f"{subject} exceeds maximum length of {limit} characters (got {length})",
            {"length": length, "limit": limit},
        )


class DeliveryError(ChannelError):
    """Raised when the provider call fails (network, auth, vendor rejection)."""


class ChannelTimeoutError(ChannelError):
    """Raised when the provider call does not complete in time."""


class ChannelAdapter(ABC):
    """
    Abstract base class for notification channels.

    Implements Template Method pattern for a consistent delivery flow:
    configuration check, recipient validation, provider call, fault
    translation. Subclasses supply :meth:`_deliver` plus the three pure
    capability methods.
    """
    #: Human-readable channel label used in failure messages.
    label: str = "Notification"
    #: Failure text reported for recipients rejected by ``validate_recipient``.
    invalid_recipient_message: str = "Invalid recipient"

    @property
    @abstractmethod
    def name(self) -> str:
        """Stable lowercase registry key."""

    @abstractmethod
    def is_configured(self) -> bool:
        """Check that all credentials/endpoints are present. No I/O."""

    @abstractmethod
    def validate_recipient(self, recipient: str) -> bool:
        """Check the recipient against the provider's addressing syntax. No I/O."""

    async def send(
        self,
        recipient: str,
        message: NotificationMessage,
        *,
        timeout: float | None = None,
    ) -> NotificationResponse:
        """
        Send one notification through this channel.

        Args:
            recipient: Channel-specific address (email, E.164 phone, chat id, ...)
            message: Message to deliver
            timeout: Optional per-call timeout in seconds, passed to the transport

        Returns:
            NotificationResponse; failures are returned, never raised
        """
        try:
            self._ensure_ready(recipient)
            response = await self._deliver(recipient, message, timeout)
        except ChannelError as e:
            logger.warning("notification_delivery_failed",
                           channel=self.name, recipient=recipient,
                           error_type=type(e).__name__, error=e.reason)
            return NotificationResponse.failed(e.reason or type(e).__name__, e.data, self.name)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning("notification_delivery_timeout",
                           channel=self.name, recipient=recipient, timeout=timeout)
            return NotificationResponse.failed(
                f"{self.label} request timed out", {"timeout": timeout}, self.name,
            )
        except Exception as e:
            logger.error("notification_delivery_error",
                         channel=self.name, recipient=recipient,
                         error_type=type(e).__name__, error=str(e))
            return NotificationResponse.failed(
                str(e) or type(e).__name__, {"error": type(e).__name__}, self.name,
            )

        if response.is_success():
            logger.info("notification_delivered",
                        channel=self.name, recipient=recipient, message_id=response.message_id)
        else:
            logger.warning("notification_delivery_failed",
                           channel=self.name, recipient=recipient, error=response.error)
        return response

    def _ensure_ready(self, recipient: str) -> None:
        if not self.is_configured():
            raise ChannelNotConfiguredError(self.name, f"{self.label} channel is not configured")
        if not self.validate_recipient(recipient):
            raise InvalidRecipientError(
                self.name, self.invalid_recipient_message, {"recipient": recipient},
            )

    @abstractmethod
    async def _deliver(
        self,
        recipient: str,
        message: NotificationMessage,
        timeout: float | None,
    ) -> NotificationResponse:
        """Actual delivery implementation. May raise ``ChannelError``."""

    def _success(self, message_id: str | None, data: Any = None) -> NotificationResponse:
        return NotificationResponse.succeeded(message_id, data, self.name)

    async def aclose(self) -> None:
        """Release transport resources owned by the adapter."""


class HttpChannelAdapter(ChannelAdapter):
    """
    Base for adapters whose provider is reached over HTTP.

    The ``httpx.AsyncClient`` can be injected (shared pools, fake transports in
    tests); otherwise one is created lazily and owned by the adapter.
    """
    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self._timeout_seconds = timeout_seconds

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout_seconds)
            self._owns_client = True
        return self._client

    async def _request(
        self,
        method: str,
        url: str,
        *,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Issue one HTTP call, translating transport faults into channel errors."""
        client = await self._get_client()
        effective_timeout = timeout if timeout is not None else self._timeout_seconds
        kwargs["timeout"] = effective_timeout
        try:
            response = await client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise ChannelTimeoutError(
                self.name, f"{self.label} request timed out", {"timeout": effective_timeout},
            ) from e
        except httpx.HTTPStatusError as e:
            raise DeliveryError(
                self.name,
                _describe_http_error(e.response),
                {"status_code": e.response.status_code, "response": _response_body(e.response)},
            ) from e
        except httpx.HTTPError as e:
            raise DeliveryError(
                self.name, str(e) or type(e).__name__, {"error": type(e).__name__},
            ) from e
        return response

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None and not self._client.is_closed:
            await self._client.aclose()


def is_adapter_configured(adapter: ChannelAdapter) -> bool:
    """Configuration check that treats a raising adapter as not configured."""
    try:
        return bool(adapter.is_configured())
    except Exception as e:
        logger.warning("channel_configuration_check_failed",
                       channel=adapter.name, error_type=type(e).__name__, error=str(e))
        return False


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text[:200] if response.text else None


def _describe_http_error(response: httpx.Response) -> str:
    """Pull the vendor's error text out of a failed HTTP response."""
    body = _response_body(response)
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        for key in ("message", "description"):
            if body.get(key):
                return str(body[key])
        if isinstance(error, str) and error:
            return error
    return f"HTTP {response.status_code}"


class ChannelRegistry:
    """
    Registry of notification channels keyed by channel name.

    Copy-on-write: registration swaps in a new read-only mapping under a
    lock, lookups read the current snapshot without locking.
    """
    def __init__(self, channels: Iterable[ChannelAdapter] = ()) -> None:
        self._lock = threading.Lock()
        self._channels: Mapping[str, ChannelAdapter] = MappingProxyType({})
        for channel in channels:
            self.register_channel(channel)
        logger.info("channel_registry_initialized", channels=self.list_channels())

    def register_channel(self, channel: ChannelAdapter) -> None:
        """Register a channel, replacing any adapter with the same name."""
        name = channel.name
        with self._lock:
            replaced = name in self._channels
            updated = dict(self._channels)
            updated[name] = channel
            self._channels = MappingProxyType(updated)
        logger.info("channel_registered", channel=name,
                    configured=is_adapter_configured(channel), replaced=replaced)

    def get_channel(self, name: str) -> ChannelAdapter | None:
        """Get a channel by name."""
        return self._channels.get(name)

    def list_channels(self) -> list[str]:
        """List registered channel names in registration order."""
        return list(self._channels)

    def snapshot(self) -> Mapping[str, ChannelAdapter]:
        """Current read-only name → adapter mapping."""
        return self._channels

    def __contains__(self, name: object) -> bool:
        return name in self._channels

    def __len__(self) -> int:
        return len(self._channels)

    async def aclose(self) -> None:
        """Close transport resources of every registered channel."""
        for name, channel in self._channels.items():
            try:
                await channel.aclose()
            except Exception as e:
                logger.warning("channel_close_failed", channel=name, error=str(e))
