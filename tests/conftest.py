"""
Pytest configuration and fixtures for notification dispatcher tests.
"""
from __future__ import annotations

import asyncio
from typing import Any, Callable

import httpx
import pytest

from notification_dispatcher.config import (
    DiscordSettings,
    EmailSettings,
    MessengerSettings,
    SlackSettings,
    TeamsSettings,
    TelegramSettings,
    TwilioSettings,
)
from notification_dispatcher.domain import (
    ChannelAdapter,
    ChannelRegistry,
    NotificationMessage,
    NotificationResponse,
    NotificationService,
)


class StubChannel(ChannelAdapter):
    """In-memory channel that records deliveries instead of calling a provider."""

    def __init__(
        self,
        name: str = "email",
        configured: bool = True,
        accepts: Callable[[str], bool] | None = None,
        delay: float = 0.0,
        error: Exception | None = None,
    ) -> None:
        self._name = name
        self._configured = configured
        self._accepts = accepts or (lambda recipient: "@" in recipient)
        self._delay = delay
        self._error = error
        self.sent: list[tuple[str, NotificationMessage]] = []

    @property
    def name(self) -> str:
        return self._name

    def is_configured(self) -> bool:
        return self._configured

    def validate_recipient(self, recipient: str) -> bool:
        return self._accepts(recipient)

    async def _deliver(
        self,
        recipient: str,
        message: NotificationMessage,
        timeout: float | None,
    ) -> NotificationResponse:
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        self.sent.append((recipient, message))
        return self._success(f"{self._name}-{len(self.sent)}", {"recipient": recipient})


class RecordingTransport:
    """httpx transport handler that records requests and replies from a route function."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]) -> None:
        self._respond = respond
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._respond(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


def json_reply(payload: Any, status_code: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    """Route function answering every request with the same JSON body."""
    return lambda request: httpx.Response(status_code, json=payload)


@pytest.fixture
def message():
    """Create a message with title and body only."""
    return NotificationMessage.create("Deploy finished", "Build 42 is live")


@pytest.fixture
def rich_message(message):
    """Create a message carrying structured data."""
    return message.with_data({"env": "prod", "build": 42})


@pytest.fixture
def email_stub():
    """Create a configured stub email channel."""
    return StubChannel("email")


@pytest.fixture
def sms_stub():
    """Create a configured stub SMS channel accepting E.164-looking numbers."""
    return StubChannel("sms", accepts=lambda recipient: recipient.startswith("+"))


@pytest.fixture
def notification_service(email_stub, sms_stub):
    """Create a notification service over stub channels."""
    return NotificationService(ChannelRegistry([email_stub, sms_stub]))


@pytest.fixture
def email_settings():
    """Create email configuration."""
    return EmailSettings(
        enabled=True,
        host="smtp.test.com",
        port=587,
        username="mailer@test.com",
        password="secret",
        from_address="Alerts <alerts@test.com>",
    )


@pytest.fixture
def twilio_settings():
    """Create Twilio configuration."""
    return TwilioSettings(
        enabled=True,
        account_sid="AC_TEST_SID",
        auth_token="TEST_TOKEN",
        from_number="+15551234567",
    )


@pytest.fixture
def slack_settings():
    return SlackSettings(enabled=True, bot_token="xoxb-test")


@pytest.fixture
def discord_settings():
    return DiscordSettings(enabled=True, bot_token="discord-test")


@pytest.fixture
def teams_settings():
    return TeamsSettings(enabled=True, webhook_url="https://example.webhook.office.com/hook")


@pytest.fixture
def telegram_settings():
    return TelegramSettings(enabled=True, bot_token="123:ABC")


@pytest.fixture
def messenger_settings():
    return MessengerSettings(enabled=True, page_access_token="page-token")
