"""
Notification Dispatcher - Observability.

Structured logging setup shared by the API process and embedding applications.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import structlog

from .config import Environment, ObservabilityConfig, ServiceConfiguration


def configure_logging(
    service: ServiceConfiguration | None = None,
    observability: ObservabilityConfig | None = None,
) -> None:
    """Configure structured logging with structlog."""
    service = service or ServiceConfiguration()
    observability = observability or ObservabilityConfig()
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _add_service_context(service.name, service.env.value),
    ]
    if service.env == Environment.DEVELOPMENT and observability.log_format == "console":
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.extend([
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ])
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, service.log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _add_service_context(service_name: str, environment: str) -> Callable[..., Any]:
    """Processor to add service context to logs."""
    def processor(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict["service"] = service_name
        event_dict["environment"] = environment
        return event_dict
    return processor
