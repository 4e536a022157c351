"""Host environment contracts — visibility, permissions and sound cues."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class Visibility(StrEnum):
    VISIBLE = "visible"
    HIDDEN = "hidden"


class Permission(StrEnum):
    DEFAULT = "default"
    GRANTED = "granted"
    DENIED = "denied"


@runtime_checkable
class EnvironmentSignals(Protocol):
    """What the host tells the orchestrator about its surroundings."""

    def visibility(self) -> Visibility:
        """Whether the user is currently looking at the companion."""
        ...

    def notification_permission(self) -> Permission:
        ...

    async def request_notification_permission(self) -> Permission:
        """Ask the user for permission and return the resulting state."""
        ...


@runtime_checkable
class SoundCues(Protocol):
    def play_sent(self) -> None: ...

    def play_received(self) -> None: ...


class HeadlessEnvironment:
    """In-process environment for hosts without a window.

    Visibility and permission are plain attributes the host flips. A
    headless host starts hidden: nobody is watching until the user types.
    """

    def __init__(
        self,
        visibility: Visibility = Visibility.HIDDEN,
        permission: Permission = Permission.DEFAULT,
        *,
        grant_on_request: bool = True,
    ) -> None:
        self.current_visibility = visibility
        self.permission = permission
        self._grant_on_request = grant_on_request

    def visibility(self) -> Visibility:
        return self.current_visibility

    def notification_permission(self) -> Permission:
        return self.permission

    async def request_notification_permission(self) -> Permission:
        if self.permission == Permission.DEFAULT:
            self.permission = Permission.GRANTED if self._grant_on_request else Permission.DENIED
            logger.info("Notification permission → %s", self.permission)
        return self.permission
