"""
Alert channel implementations package for SkySentinel.

Contains the abstract AlertChannel base class and concrete
implementations for each supported broadcast destination.
"""

from .base import AlertChannel, HttpAlertChannel
from .telegram_channel import TelegramBotChannel
from .webhook_channel import WebhookChannel

__all__ = [
    "AlertChannel",
    "HttpAlertChannel",
    "TelegramBotChannel",
    "WebhookChannel",
]
