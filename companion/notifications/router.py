"""NotificationRouter — singleton that hands notifications to the active channel."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from companion.notifications.channels import NotificationChannel

logger = logging.getLogger(__name__)


class NotificationRouter:
    """Delivers ``show`` calls through the default channel.

    With no default set, a lone registered channel is used. Singleton
    accessed via ``NotificationRouter.get()``.
    """

    _instance: NotificationRouter | None = None

    def __init__(self) -> None:
        self._channels: dict[str, NotificationChannel] = {}
        self._default: str = ""

    @classmethod
    def get(cls) -> NotificationRouter:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Reset singleton — for tests only."""
        cls._instance = None

    def register_channel(self, channel: NotificationChannel) -> None:
        """Register a channel. Raises ValueError on duplicate name."""
        if channel.name in self._channels:
            msg = f"Channel '{channel.name}' is already registered"
            raise ValueError(msg)
        self._channels[channel.name] = channel

    def set_default_channel(self, name: str) -> None:
        """Route notifications to *name*. Raises KeyError if not registered."""
        if name not in self._channels:
            msg = f"Channel '{name}' is not registered"
            raise KeyError(msg)
        self._default = name

    async def show(self, title: str, body: str, icon: str | None = None) -> bool:
        """Display a notification. Returns False if no channel could take it."""
        if self._default:
            channel = self._channels[self._default]
        elif len(self._channels) == 1:
            channel = next(iter(self._channels.values()))
        else:
            logger.warning("No notification channel resolved (%d registered)", len(self._channels))
            return False
        return await channel.show(title, body, icon)
