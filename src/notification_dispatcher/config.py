"""
Notification Dispatcher - Configuration.

Centralized configuration management for the dispatcher and its channel
adapters. Each provider group is read from its own environment prefix; a
group is present (and its channels registered) only when enabled.

Architecture Layer: Infrastructure
Principles: 12-Factor App, Configuration Externalization, Type Safety
"""
from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import structlog

logger = structlog.get_logger(__name__)


class Environment(str, Enum):
    """Deployment environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class ServiceConfiguration(BaseSettings):
    """Core service configuration."""
    name: str = Field(default="notification-dispatcher")
    version: str = Field(default="1.0.0")
    env: Environment = Field(default=Environment.DEVELOPMENT)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8003, ge=1, le=65535)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_prefix="NOTIFICATION_SERVICE_",
        env_file=".env",
        extra="ignore",
    )


class ObservabilityConfig(BaseSettings):
    """Logging configuration."""
    log_format: Literal["json", "console"] = Field(default="json")

    model_config = SettingsConfigDict(
        env_prefix="OBSERVABILITY_",
        env_file=".env",
        extra="ignore",
    )


class EmailSettings(BaseSettings):
    """Email channel configuration (SMTP)."""
    enabled: bool = Field(default=False)
    host: str = Field(default="smtp.gmail.com")
    port: int = Field(default=587, ge=1, le=65535)
    secure: bool = Field(default=False, description="Implicit TLS; STARTTLS is negotiated otherwise")
    username: str = Field(default="")
    password: str = Field(default="")
    from_address: str = Field(default="")
    timeout_seconds: float = Field(default=30.0, ge=1.0, le=300.0)

    model_config = SettingsConfigDict(
        env_prefix="EMAIL_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("from_address", mode="before")
    @classmethod
    def validate_from_address(cls, v: str) -> str:
        """Validate sender address format."""
        if v and "@" not in v:
            raise ValueError("Invalid email format")
        return v.strip() if v else v


class TwilioSettings(BaseSettings):
    """Twilio configuration shared by the SMS, WhatsApp and voice channels."""
    enabled: bool = Field(default=False)
    account_sid: str = Field(default="")
    auth_token: str = Field(default="")
    from_number: str = Field(default="")
    whatsapp_from: str = Field(default="")
    api_base_url: str = Field(default="https://api.twilio.com/2010-04-01")
    timeout_seconds: float = Field(default=30.0, ge=1.0, le=300.0)

    model_config = SettingsConfigDict(
        env_prefix="TWILIO_",
        env_file=".env",
        extra="ignore",
    )


class SlackSettings(BaseSettings):
    """Slack channel configuration (bot token)."""
    enabled: bool = Field(default=False)
    bot_token: str = Field(default="")
    api_base_url: str = Field(default="https://slack.com/api")
    timeout_seconds: float = Field(default=30.0, ge=1.0, le=300.0)

    model_config = SettingsConfigDict(
        env_prefix="SLACK_",
        env_file=".env",
        extra="ignore",
    )


class DiscordSettings(BaseSettings):
    """Discord channel configuration (bot token, optional guild)."""
    enabled: bool = Field(default=False)
    bot_token: str = Field(default="")
    guild_id: str | None = Field(default=None)
    api_base_url: str = Field(default="https://discord.com/api/v10")
    timeout_seconds: float = Field(default=30.0, ge=1.0, le=300.0)

    model_config = SettingsConfigDict(
        env_prefix="DISCORD_",
        env_file=".env",
        extra="ignore",
    )


class TeamsSettings(BaseSettings):
    """Microsoft Teams channel configuration (incoming webhook)."""
    enabled: bool = Field(default=False)
    webhook_url: str = Field(default="")
    timeout_seconds: float = Field(default=30.0, ge=1.0, le=300.0)

    model_config = SettingsConfigDict(
        env_prefix="TEAMS_",
        env_file=".env",
        extra="ignore",
    )


class TelegramSettings(BaseSettings):
    """Telegram channel configuration (bot token)."""
    enabled: bool = Field(default=False)
    bot_token: str = Field(default="")
    api_base_url: str = Field(default="https://api.telegram.org")
    timeout_seconds: float = Field(default=30.0, ge=1.0, le=300.0)

    model_config = SettingsConfigDict(
        env_prefix="TELEGRAM_",
        env_file=".env",
        extra="ignore",
    )


class MessengerSettings(BaseSettings):
    """Facebook Messenger channel configuration (page access token)."""
    enabled: bool = Field(default=False)
    page_access_token: str = Field(default="")
    api_url: str = Field(default="https://graph.facebook.com/v18.0/me/messages")
    timeout_seconds: float = Field(default=30.0, ge=1.0, le=300.0)

    model_config = SettingsConfigDict(
        env_prefix="MESSENGER_",
        env_file=".env",
        extra="ignore",
    )


_CHANNEL_GROUPS: dict[str, tuple[str, ...]] = {
    "email": ("email",),
    "twilio": ("sms", "whatsapp", "voice"),
    "slack": ("slack",),
    "discord": ("discord",),
    "teams": ("teams",),
    "telegram": ("telegram",),
    "messenger": ("messenger",),
}


class NotificationDispatcherConfig(BaseSettings):
    """
    Aggregate dispatcher configuration.

    Channel groups are optional: ``None`` means the group is absent and its
    channels are not registered.
    """
    service: ServiceConfiguration = Field(default_factory=ServiceConfiguration)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
    email: EmailSettings | None = Field(default=None)
    twilio: TwilioSettings | None = Field(default=None)
    slack: SlackSettings | None = Field(default=None)
    discord: DiscordSettings | None = Field(default=None)
    teams: TeamsSettings | None = Field(default=None)
    telegram: TelegramSettings | None = Field(default=None)
    messenger: MessengerSettings | None = Field(default=None)

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @staticmethod
    def load() -> NotificationDispatcherConfig:
        """Load configuration from environment, keeping only enabled groups."""
        groups = {
            "email": EmailSettings(),
            "twilio": TwilioSettings(),
            "slack": SlackSettings(),
            "discord": DiscordSettings(),
            "teams": TeamsSettings(),
            "telegram": TelegramSettings(),
            "messenger": MessengerSettings(),
        }
        config = NotificationDispatcherConfig(
            **{name: group for name, group in groups.items() if group.enabled}
        )
        logger.info(
            "notification_config_loaded",
            service=config.service.name,
            env=config.service.env.value,
            channels=config.get_enabled_channels(),
        )
        return config

    def get_enabled_channels(self) -> list[str]:
        """Get the channel names this configuration registers."""
        channels: list[str] = []
        for group, names in _CHANNEL_GROUPS.items():
            if getattr(self, group) is not None:
                channels.extend(names)
        return channels

    def is_production(self) -> bool:
        """Check if running in production."""
        return self.service.env == Environment.PRODUCTION


_config: NotificationDispatcherConfig | None = None


def get_config() -> NotificationDispatcherConfig:
    """Get singleton configuration instance."""
    global _config
    if _config is None:
        _config = NotificationDispatcherConfig.load()
    return _config


def reset_config() -> None:
    """Reset configuration (useful for testing)."""
    global _config
    _config = None
