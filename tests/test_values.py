"""
Unit tests for the message and response value objects.
"""
import pytest
from pydantic import ValidationError

from notification_dispatcher.domain import NotificationMessage, NotificationResponse


class TestNotificationMessage:
    """Tests for NotificationMessage."""

    def test_create_minimal(self):
        """Test creating a message with title and body only."""
        message = NotificationMessage.create("Hello", "World")
        assert message.title == "Hello"
        assert message.body == "World"
        assert message.data is None
        assert message.attachments is None
        assert message.options is None

    def test_builders_set_every_field(self):
        """Test chaining every builder yields exactly the supplied values."""
        message = (
            NotificationMessage.create("t", "b")
            .with_data({"k": "v"})
            .with_attachments(["/tmp/report.pdf"])
            .with_options({"voice": "man"})
        )
        assert (message.title, message.body) == ("t", "b")
        assert message.data == {"k": "v"}
        assert message.attachments == ["/tmp/report.pdf"]
        assert message.options == {"voice": "man"}

    def test_builders_leave_source_unchanged(self):
        """Test builders return copies."""
        base = NotificationMessage.create("t", "b")
        enriched = base.with_data({"k": "v"})
        assert base.data is None
        assert enriched is not base

    def test_builders_copy_containers(self):
        """Test later mutation of a caller's dict does not leak into the message."""
        data = {"k": "v"}
        message = NotificationMessage.create("t", "b").with_data(data)
        data["k"] = "changed"
        assert message.data == {"k": "v"}

    def test_message_is_frozen(self):
        """Test fields cannot be reassigned."""
        message = NotificationMessage.create("t", "b")
        with pytest.raises(ValidationError):
            message.title = "other"

    def test_data_items_stringifies_values(self):
        """Test data is flattened in insertion order with text values."""
        message = NotificationMessage.create("t", "b").with_data({"count": 3, "ok": True})
        assert message.data_items() == [("count", "3"), ("ok", "True")]

    def test_data_items_empty_without_data(self):
        assert NotificationMessage.create("t", "b").data_items() == []
        assert NotificationMessage.create("t", "b").with_data({}).data_items() == []

    def test_option_lookup(self):
        message = NotificationMessage.create("t", "b").with_options({"voice": "man"})
        assert message.option("voice") == "man"
        assert message.option("language", "en-US") == "en-US"
        assert NotificationMessage.create("t", "b").option("voice", "alice") == "alice"


class TestNotificationResponse:
    """Tests for NotificationResponse."""

    def test_succeeded(self):
        """Test a successful response carries id and data, no error."""
        response = NotificationResponse.succeeded("abc", {"status": "queued"}, "sms")
        assert response.is_success()
        assert not response.is_failure()
        assert response.message_id == "abc"
        assert response.data == {"status": "queued"}
        assert response.error is None
        assert response.channel == "sms"

    def test_failed(self):
        """Test a failure response carries an error and no id."""
        response = NotificationResponse.failed("boom", {"length": 1601})
        assert response.is_failure()
        assert not response.is_success()
        assert response.error == "boom"
        assert response.message_id is None
        assert response.data == {"length": 1601}
        assert response.channel is None

    def test_success_without_message_id_allowed(self):
        assert NotificationResponse.succeeded(None).is_success()

    def test_failure_requires_error(self):
        with pytest.raises(ValidationError):
            NotificationResponse(success=False)

    def test_failure_rejects_message_id(self):
        with pytest.raises(ValidationError):
            NotificationResponse(success=False, error="x", message_id="abc")

    def test_success_rejects_error(self):
        with pytest.raises(ValidationError):
            NotificationResponse(success=True, error="x")
