"""
Notification Dispatcher - FastAPI Application.

Architecture Layer: Infrastructure
Principles: 12-Factor App, Dependency Injection, Configuration Externalization
"""
from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import structlog

from .config import Environment, NotificationDispatcherConfig
from .domain import NotificationService, create_notification_service
from .observability import configure_logging

logger = structlog.get_logger(__name__)

_notification_service: NotificationService | None = None


def get_notification_service() -> NotificationService:
    """Get the global notification service instance."""
    if _notification_service is None:
        raise RuntimeError("Notification service not initialized")
    return _notification_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global _notification_service

    config = NotificationDispatcherConfig.load()
    configure_logging(config.service, config.observability)

    logger.info("notification_service_starting",
                service=config.service.name,
                env=config.service.env.value,
                channels=config.get_enabled_channels())

    _notification_service = create_notification_service(config)
    logger.info("notification_service_ready",
                configured=_notification_service.get_configured_channels())

    yield

    await _notification_service.aclose()
    logger.info("notification_service_shutdown")
    _notification_service = None


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    config = NotificationDispatcherConfig.load()
    is_production = config.is_production()

    app = FastAPI(
        title="Notification Dispatcher",
        description="Multi-channel notification dispatch for email, SMS, chat and voice",
        version=config.service.version,
        lifespan=lifespan,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if config.service.env == Environment.DEVELOPMENT else [],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from .api import router as notification_router
    app.include_router(notification_router)

    @app.get("/", tags=["health"])
    async def root():
        """Service information endpoint."""
        return {
            "service": config.service.name,
            "version": config.service.version,
            "status": "running",
            "environment": config.service.env.value,
        }

    @app.get("/ready", tags=["health"])
    async def ready():
        """Readiness probe endpoint."""
        if _notification_service is None:
            return {"status": "not_ready", "reason": "service_not_initialized"}
        return {"status": "ready"}

    return app


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    config = NotificationDispatcherConfig.load()
    uvicorn.run(
        "notification_dispatcher.main:create_app",
        factory=True,
        host=config.service.host,
        port=config.service.port,
        reload=config.service.env == Environment.DEVELOPMENT,
        log_level=config.service.log_level.lower(),
    )


if __name__ == "__main__":
    run()
