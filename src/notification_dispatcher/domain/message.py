"""
Notification Dispatcher - Notification Message.

Channel-agnostic description of what to send. Messages are immutable; the
``with_*`` builders return a modified copy so a base message can be reused
safely across channels and recipients.

Architecture Layer: Domain
Principles: Immutable Value Objects, Builder-style Derivation
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class NotificationMessage(BaseModel):
    """Immutable notification content shared by every channel."""
    title: str = Field(..., description="Subject / headline")
    body: str = Field(..., description="Main message text")
    data: dict[str, Any] | None = Field(default=None, description="Structured enrichment rendered by each channel")
    attachments: list[str] | None = Field(default=None, description="File references to attach")
    options: dict[str, Any] | None = Field(default=None, description="Provider-specific hints")

    model_config = {"frozen": True}

    @classmethod
    def create(cls, title: str, body: str) -> NotificationMessage:
        """Create a message with only a title and a body."""
        return cls(title=title, body=body)

    def with_data(self, data: dict[str, Any] | None) -> NotificationMessage:
        return self.model_copy(update={"data": dict(data) if data is not None else None})

    def with_attachments(self, attachments: list[str] | None) -> NotificationMessage:
        return self.model_copy(
            update={"attachments": list(attachments) if attachments is not None else None}
        )

    def with_options(self, options: dict[str, Any] | None) -> NotificationMessage:
        return self.model_copy(update={"options": dict(options) if options is not None else None})

    def data_items(self) -> list[tuple[str, str]]:
        """
        Flatten ``data`` into ``(key, text)`` pairs in insertion order.

        Returns an empty list when there is no data, which channels treat as
        "omit the details section".
        """
        if not self.data:
            return []
        return [(str(key), str(value)) for key, value in self.data.items()]

    def option(self, key: str, default: Any = None) -> Any:
        """Read a provider hint, falling back to ``default``."""
        if not self.options:
            return default
        return self.options.get(key, default)
