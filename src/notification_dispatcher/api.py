"""
Notification Dispatcher - REST API Endpoints.

FastAPI router exposing dispatch, batch/multi-channel dispatch and channel
introspection. Delivery failures are regular 200 responses with
``success=false``; only malformed requests are rejected.

Architecture Layer: Interface/Adapter
Principles: REST, Input Validation, Structured Responses
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
import structlog

from .domain import NotificationMessage, NotificationResponse, NotificationService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


class MessagePayload(BaseModel):
    """Message content accepted by the API."""
    title: str = Field(..., min_length=1, description="Subject / headline")
    body: str = Field(..., description="Message text")
    data: dict[str, Any] | None = Field(default=None, description="Structured details")
    options: dict[str, Any] | None = Field(default=None, description="Provider-specific hints")

    def to_message(self) -> NotificationMessage:
        message = NotificationMessage.create(self.title, self.body)
        if self.data is not None:
            message = message.with_data(self.data)
        if self.options is not None:
            message = message.with_options(self.options)
        return message


class SendRequest(BaseModel):
    """API request to send through one channel."""
    recipient: str = Field(..., description="Channel-specific recipient")
    channel: str = Field(..., min_length=1, description="Registered channel name")
    message: MessagePayload
    timeout: float | None = Field(default=None, gt=0, le=300, description="Per-call timeout in seconds")

    model_config = {"json_schema_extra": {
        "example": {
            "recipient": "+15551234567",
            "channel": "sms",
            "message": {"title": "Deploy finished", "body": "Build 42 is live", "data": {"env": "prod"}},
        }
    }}


class BatchSendRequest(BaseModel):
    """API request to send one message to many recipients on one channel."""
    recipients: list[str] = Field(..., min_length=1, description="Recipients, answered in order")
    channel: str = Field(..., min_length=1)
    message: MessagePayload
    timeout: float | None = Field(default=None, gt=0, le=300)


class MultiChannelSendRequest(BaseModel):
    """API request to send one message to one recipient through several channels."""
    recipient: str
    channels: list[str] = Field(..., min_length=1)
    message: MessagePayload
    timeout: float | None = Field(default=None, gt=0, le=300)


class ChannelsResponse(BaseModel):
    """Registered and configured channel names."""
    available: list[str]
    configured: list[str]


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    timestamp: str
    channels: dict[str, bool]


def get_dispatch_service() -> NotificationService:
    """Dependency to get notification service instance."""
    from .main import get_notification_service
    return get_notification_service()


@router.post("/send", response_model=NotificationResponse)
async def send_notification(
    request: SendRequest,
    service: NotificationService = Depends(get_dispatch_service),
) -> NotificationResponse:
    """Send a notification to one recipient through one channel."""
    logger.info("api_send_notification", channel=request.channel)
    return await service.send(
        request.recipient, request.message.to_message(), request.channel, timeout=request.timeout,
    )


@router.post("/send/batch", response_model=list[NotificationResponse])
async def send_batch(
    request: BatchSendRequest,
    service: NotificationService = Depends(get_dispatch_service),
) -> list[NotificationResponse]:
    """Send a notification to many recipients on one channel."""
    logger.info("api_send_batch", channel=request.channel, recipients=len(request.recipients))
    return await service.send_to_many(
        request.recipients, request.message.to_message(), request.channel, timeout=request.timeout,
    )


@router.post("/send/multi-channel", response_model=dict[str, NotificationResponse])
async def send_multi_channel(
    request: MultiChannelSendRequest,
    service: NotificationService = Depends(get_dispatch_service),
) -> dict[str, NotificationResponse]:
    """Send a notification to one recipient through several channels."""
    logger.info("api_send_multi_channel", channels=request.channels)
    return await service.send_to_multiple_channels(
        request.recipient, request.message.to_message(), request.channels, timeout=request.timeout,
    )


@router.get("/channels", response_model=ChannelsResponse)
async def list_channels(
    service: NotificationService = Depends(get_dispatch_service),
) -> ChannelsResponse:
    """List registered channels and those currently configured."""
    return ChannelsResponse(
        available=service.get_available_channels(),
        configured=service.get_configured_channels(),
    )


@router.get("/health", response_model=HealthResponse)
async def health_check(
    service: NotificationService = Depends(get_dispatch_service),
) -> HealthResponse:
    """Check that at least one registered channel is configured."""
    configured = set(service.get_configured_channels())
    channels = {name: name in configured for name in service.get_available_channels()}
    overall_status = "healthy" if any(channels.values()) else "unhealthy"

    return HealthResponse(
        status=overall_status,
        timestamp=datetime.now(timezone.utc).isoformat(),
        channels=channels,
    )
