"""Notification delivery abstraction layer."""

from companion.notifications.channels import NotificationChannel
from companion.notifications.router import NotificationRouter
from companion.notifications.webhook_channel import LogChannel, WebhookChannel

__all__ = [
    "LogChannel",
    "NotificationChannel",
    "NotificationRouter",
    "WebhookChannel",
]
