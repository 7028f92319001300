"""
Notification Dispatcher - Channel Adapters.

One adapter per delivery provider, each implementing ``ChannelAdapter``.
"""
from .discord import DiscordChannel
from .email import EmailChannel
from .messenger import MessengerChannel
from .slack import SlackChannel
from .teams import TeamsChannel
from .telegram import TelegramChannel
from .twilio import SMSChannel, TwilioChannel, VoiceChannel, WhatsAppChannel

__all__ = [
    "DiscordChannel",
    "EmailChannel",
    "MessengerChannel",
    "SlackChannel",
    "SMSChannel",
    "TeamsChannel",
    "TelegramChannel",
    "TwilioChannel",
    "VoiceChannel",
    "WhatsAppChannel",
]
