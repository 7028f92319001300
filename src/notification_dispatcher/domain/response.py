"""
Notification Dispatcher - Notification Response.

Normalized outcome of a single send attempt. Callers treat
``is_failure()`` as the only failure signal; no exception crosses the
dispatch boundary.

Architecture Layer: Domain
Principles: Immutable Value Objects, Result over Exceptions
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator


class NotificationResponse(BaseModel):
    """Result of a notification delivery attempt."""
    success: bool
    message_id: str | None = Field(default=None, description="Provider-assigned id, success only")
    error: str | None = Field(default=None, description="Human-readable reason, failure only")
    data: Any = Field(default=None, description="Provider metadata or failure context")
    channel: str | None = Field(default=None, description="Channel that produced the response")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_outcome_fields(self) -> NotificationResponse:
        if self.success and self.error is not None:
            raise ValueError("successful response cannot carry an error")
        if not self.success:
            if not self.error:
                raise ValueError("failed response requires an error")
            if self.message_id is not None:
                raise ValueError("failed response cannot carry a message id")
        return self

    @classmethod
    def succeeded(
        cls,
        message_id: str | None,
        data: Any = None,
        channel: str | None = None,
    ) -> NotificationResponse:
        """Create a successful response."""
        return cls(success=True, message_id=message_id, data=data, channel=channel)

    @classmethod
    def failed(
        cls,
        error: str,
        data: Any = None,
        channel: str | None = None,
    ) -> NotificationResponse:
        """Create a failure response."""
        return cls(success=False, error=error, data=data, channel=channel)

    def is_success(self) -> bool:
        return self.success

    def is_failure(self) -> bool:
        return not self.success
