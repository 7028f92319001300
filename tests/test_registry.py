"""
Unit tests for the adapter contract and channel registry.
"""
import asyncio

import pytest

from notification_dispatcher.domain import (
    ChannelError,
    ChannelRegistry,
    DeliveryError,
    PayloadTooLargeError,
    is_adapter_configured,
    is_e164,
)

from conftest import StubChannel


class TestE164:
    """Tests for phone number validation."""

    @pytest.mark.parametrize("number", ["+15551234567", "+447911123456", "+12"])
    def test_valid(self, number):
        assert is_e164(number)

    @pytest.mark.parametrize("number", ["", "12345", "+0123456", "+1555123456789012", "+1 555 123"])
    def test_invalid(self, number):
        assert not is_e164(number)


class TestChannelAdapterSend:
    """Tests for the template send flow shared by every adapter."""

    @pytest.mark.asyncio
    async def test_success(self, message):
        channel = StubChannel("email")
        response = await channel.send("user@example.com", message)
        assert response.is_success()
        assert response.message_id == "email-1"
        assert response.channel == "email"

    @pytest.mark.asyncio
    async def test_not_configured(self, message):
        """Test unconfigured adapter fails before delivery."""
        channel = StubChannel("email", configured=False)
        response = await channel.send("user@example.com", message)
        assert response.is_failure()
        assert response.error == "Notification channel is not configured"
        assert channel.sent == []

    @pytest.mark.asyncio
    async def test_invalid_recipient(self, message):
        """Test rejected recipients are reported with the recipient echoed."""
        channel = StubChannel("email")
        response = await channel.send("not-an-address", message)
        assert response.is_failure()
        assert response.error == "Invalid recipient"
        assert response.data == {"recipient": "not-an-address"}
        assert channel.sent == []

    @pytest.mark.asyncio
    async def test_channel_error_becomes_failure(self, message):
        channel = StubChannel("sms", error=PayloadTooLargeError("sms", "SMS body", 1700, 1600))
        response = await channel.send("user@example.com", message)
        assert response.is_failure()
        assert response.error == "SMS body exceeds maximum length of 1600 characters (got 1700)"
        assert response.data == {"length": 1700, "limit": 1600}
        assert response.channel == "sms"

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_failure(self, message):
        """Test arbitrary faults never escape send."""
        channel = StubChannel("email", error=RuntimeError("socket exploded"))
        response = await channel.send("user@example.com", message)
        assert response.is_failure()
        assert response.error == "socket exploded"
        assert response.data == {"error": "RuntimeError"}

    @pytest.mark.asyncio
    async def test_timeout_becomes_failure(self, message):
        channel = StubChannel("email", error=asyncio.TimeoutError())
        response = await channel.send("user@example.com", message, timeout=2.0)
        assert response.is_failure()
        assert response.error == "Notification request timed out"
        assert response.data == {"timeout": 2.0}

    @pytest.mark.asyncio
    async def test_channel_error_without_reason(self, message):
        """Test an empty reason still produces a valid failure response."""
        channel = StubChannel("email", error=ChannelError("email", ""))
        response = await channel.send("user@example.com", message)
        assert response.is_failure()
        assert response.error == "ChannelError"
        assert response.channel == "email"


class TestChannelRegistry:
    """Tests for ChannelRegistry."""

    def test_register_and_get(self):
        registry = ChannelRegistry()
        channel = StubChannel("email")
        registry.register_channel(channel)
        assert registry.get_channel("email") is channel
        assert "email" in registry
        assert len(registry) == 1

    def test_register_with_raising_configuration_check(self):
        """Test registration survives an adapter whose configuration check raises."""
        class BrokenConfig(StubChannel):
            def is_configured(self):
                raise RuntimeError("credential store unavailable")

        registry = ChannelRegistry()
        registry.register_channel(BrokenConfig("pager"))
        assert registry.list_channels() == ["pager"]
        assert not is_adapter_configured(registry.get_channel("pager"))

    def test_get_missing_returns_none(self):
        assert ChannelRegistry().get_channel("fax") is None

    def test_last_registration_wins(self):
        """Test re-registering a name replaces the adapter."""
        first, second = StubChannel("email"), StubChannel("email")
        registry = ChannelRegistry([first])
        registry.register_channel(second)
        assert registry.get_channel("email") is second
        assert registry.list_channels() == ["email"]

    def test_list_preserves_registration_order(self):
        registry = ChannelRegistry([StubChannel("sms"), StubChannel("email"), StubChannel("slack")])
        assert registry.list_channels() == ["sms", "email", "slack"]

    def test_snapshot_is_stable(self):
        """Test a snapshot is unaffected by later registrations."""
        registry = ChannelRegistry([StubChannel("email")])
        snapshot = registry.snapshot()
        registry.register_channel(StubChannel("sms"))
        assert list(snapshot) == ["email"]
        with pytest.raises(TypeError):
            snapshot["sms"] = StubChannel("sms")

    @pytest.mark.asyncio
    async def test_aclose_continues_after_failure(self):
        """Test one failing close does not stop the others."""
        class FailingClose(StubChannel):
            async def aclose(self):
                raise DeliveryError(self.name, "close failed")

        closed = []

        class TrackingClose(StubChannel):
            async def aclose(self):
                closed.append(self.name)

        registry = ChannelRegistry([FailingClose("email"), TrackingClose("sms")])
        await registry.aclose()
        assert closed == ["sms"]
