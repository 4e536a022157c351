"""ProactiveHeartbeat — decides when the companion reaches out on its own."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from companion.config import settings
from companion.environment import Permission, Visibility
from companion.session.models import NOTIFICATION_INTERVALS, Frequency, Message

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from companion.environment import EnvironmentSignals
    from companion.gate import GenerationGate
    from companion.pipeline import MessagePipeline
    from companion.session.models import Session
    from companion.session.store import SessionStore

    ProactiveGenerator = Callable[[Session], Awaitable[str]]

logger = logging.getLogger(__name__)

JOB_ID = "proactive-heartbeat"
_EPOCH = datetime.fromtimestamp(0, UTC)


class Notifier(Protocol):
    async def show(self, title: str, body: str, icon: str | None = None) -> bool: ...


class TickOutcome(StrEnum):
    SKIPPED = "skipped"  # disabled, busy, visible, or no permission
    NOT_DUE = "not_due"  # idle time below the tier's interval
    SENT = "sent"
    DISCARDED = "discarded"  # generated, but the user came back meanwhile
    FAILED = "failed"


def interval_for(frequency: Frequency | str) -> timedelta:
    """Minimum idle time for *frequency*; unknown tiers fall back to the configured default."""
    try:
        return NOTIFICATION_INTERVALS[Frequency(frequency)]
    except (KeyError, ValueError):
        return timedelta(seconds=settings.proactive_fallback_interval_seconds)


def idle_since(session: Session) -> datetime:
    """Timestamp of the last chat message, or the epoch for an empty chat."""
    last = session.last_message
    return last.created_at if last is not None else _EPOCH


class ProactiveHeartbeat:
    """Checks every few seconds whether to send an unprompted message.

    State is always read through *store*; nothing about the session is
    captured when the heartbeat is built.

    Args:
        store: Live session store.
        gate: Shared generation gate; ``generating`` is checked, never taken.
        pipeline: Used to append the proactive message.
        generator: Async ``(session)`` → message text.
        environment: Visibility and permission signals.
        notifier: Anything with ``show(title, body, icon)``.
        interval_seconds: Tick period (default from settings).
        clock: Returns the current aware datetime (tests inject a fake).
    """

    def __init__(
        self,
        store: SessionStore,
        gate: GenerationGate,
        pipeline: MessagePipeline,
        generator: ProactiveGenerator,
        environment: EnvironmentSignals,
        notifier: Notifier,
        interval_seconds: int | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._gate = gate
        self._pipeline = pipeline
        self._generator = generator
        self._environment = environment
        self._notifier = notifier
        self._interval_seconds = interval_seconds or settings.heartbeat_interval_seconds
        self._clock = clock or (lambda: datetime.now(UTC))
        self._scheduler: AsyncIOScheduler | None = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None

    # -- Lifecycle -------------------------------------------------------------

    async def start(self) -> None:
        if self._scheduler is not None:
            return
        self._scheduler = AsyncIOScheduler(timezone=UTC)
        self._scheduler.add_job(
            self.tick,
            trigger=IntervalTrigger(seconds=self._interval_seconds),
            id=JOB_ID,
            name="Proactive message check",
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info("Heartbeat started (every %ds)", self._interval_seconds)

    async def stop(self) -> None:
        """Stop ticking. A send already in flight runs to completion."""
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Heartbeat stopped")

    # -- Tick ------------------------------------------------------------------

    def _should_skip(self, session: Session) -> bool:
        notifications = session.notifications
        if not notifications.enabled or notifications.frequency == Frequency.OFF:
            return True
        if self._gate.generating.held or self._gate.proactive_sending.held:
            return True
        if self._environment.visibility() != Visibility.HIDDEN:
            return True
        return self._environment.notification_permission() != Permission.GRANTED

    async def tick(self) -> TickOutcome:
        snapshot = self._store.read()
        if self._should_skip(snapshot):
            return TickOutcome.SKIPPED

        idle = self._clock() - idle_since(snapshot)
        if idle < interval_for(snapshot.notifications.frequency):
            return TickOutcome.NOT_DUE

        # Title and icon come from the snapshot the tick started from.
        companion = snapshot.companion
        with self._gate.proactive_sending.hold():
            try:
                text = await self._generator(snapshot)
                # The user may have come back while the message was being written.
                if self._environment.visibility() != Visibility.HIDDEN:
                    logger.info("Proactive message discarded: companion is visible again")
                    return TickOutcome.DISCARDED
                self._pipeline.add_message(Message.assistant(text, prefix="ai-proactive"))
                await self._notifier.show(companion.name, text, companion.reference_image)
                logger.info("Proactive message sent after %s idle", idle)
                return TickOutcome.SENT
            except Exception:
                logger.exception("Heartbeat proactive error")
                return TickOutcome.FAILED
