"""Webhook implementation of the NotificationChannel protocol.

POSTs ``{"title", "body", "icon"}`` as JSON to a push relay (ntfy, a
home-automation hook, a phone bridge) that turns it into a native
notification.
"""

from __future__ import annotations

import logging

import httpx

from companion.config import settings

logger = logging.getLogger(__name__)


class WebhookChannel:
    """Delivers notifications by POSTing to ``notification_webhook_url``."""

    def __init__(self, url: str | None = None, timeout: float = 10) -> None:
        self._url = url or settings.notification_webhook_url
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "webhook"

    async def show(self, title: str, body: str, icon: str | None = None) -> bool:
        if not self._url:
            logger.error("Webhook notifications not configured — missing NOTIFICATION_WEBHOOK_URL")
            return False

        payload = {"title": title, "body": body, "icon": icon}
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(self._url, json=payload)
        except httpx.HTTPError:
            logger.exception("Webhook notification failed (network error)")
            return False

        if resp.status_code >= 300:
            logger.error(
                "Webhook notification rejected: status=%d body=%s",
                resp.status_code,
                resp.text[:200],
            )
            return False
        logger.info("Notification delivered via webhook (%d chars)", len(body))
        return True


class LogChannel:
    """Writes notifications to the log. Used when no relay is configured."""

    @property
    def name(self) -> str:
        return "log"

    async def show(self, title: str, body: str, icon: str | None = None) -> bool:
        logger.info("[notification] %s: %s", title, body)
        return True
