"""
Notification Dispatcher.

Multi-channel notification dispatch over email, SMS, WhatsApp, voice, Slack,
Discord, Teams, Telegram and Messenger behind one adapter contract.

Architecture:
    - Domain Layer: Message/response values, channel contract, dispatch service
    - Channel Layer: Provider adapters (SMTP, Twilio, chat and webhook APIs)
    - Interface Layer: REST API endpoints

Usage:
    from notification_dispatcher import NotificationMessage, NotificationService
    from notification_dispatcher import create_notification_service
    from notification_dispatcher.api import router as notification_router
"""
from .domain import (
    ChannelAdapter,
    ChannelRegistry,
    NotificationMessage,
    NotificationResponse,
    NotificationService,
    create_notification_service,
    create_notification_service_async,
)

__version__ = "1.0.0"

__all__ = [
    "ChannelAdapter",
    "ChannelRegistry",
    "NotificationMessage",
    "NotificationResponse",
    "NotificationService",
    "create_notification_service",
    "create_notification_service_async",
    "__version__",
]
