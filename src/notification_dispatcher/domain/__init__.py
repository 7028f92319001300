"""
Notification Dispatcher - Domain Layer.

Message and response value objects, the channel adapter contract and the
dispatch service.
"""
from .message import NotificationMessage
from .response import NotificationResponse
from .channels import (
    ChannelAdapter,
    HttpChannelAdapter,
    ChannelRegistry,
    ChannelError,
    ChannelNotConfiguredError,
    InvalidRecipientError,
    PayloadTooLargeError,
    DeliveryError,
    ChannelTimeoutError,
    is_adapter_configured,
    is_e164,
)
from .service import (
    NotificationService,
    create_notification_service,
    create_notification_service_async,
)

__all__ = [
    # Values
    "NotificationMessage",
    "NotificationResponse",
    # Channels
    "ChannelAdapter",
    "HttpChannelAdapter",
    "ChannelRegistry",
    "ChannelError",
    "ChannelNotConfiguredError",
    "InvalidRecipientError",
    "PayloadTooLargeError",
    "DeliveryError",
    "ChannelTimeoutError",
    "is_adapter_configured",
    "is_e164",
    # Service
    "NotificationService",
    "create_notification_service",
    "create_notification_service_async",
]
