"""CompanionOrchestrator — the single entry point views talk to."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from companion.environment import Permission
from companion.gate import GenerationGate
from companion.heartbeat import ProactiveHeartbeat
from companion.pipeline import MessagePipeline
from companion.regenerate import RegenerationController
from companion.session import transforms

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from datetime import datetime

    from companion.environment import EnvironmentSignals, SoundCues
    from companion.heartbeat import Notifier, ProactiveGenerator
    from companion.pipeline import ImageGenerator, TextGenerator
    from companion.session.models import Location, Message, Session
    from companion.session.store import SessionStore
    from companion.session.transforms import Transform

    JournalGenerator = Callable[[Session], Awaitable[str]]

logger = logging.getLogger(__name__)


class CompanionOrchestrator:
    """Owns the session and every path that writes to it.

    Args:
        store: The session store (see ``SessionStore.open``).
        text_generator: Conversational reply collaborator.
        image_generator: Photo collaborator.
        proactive_generator: Unprompted message collaborator.
        journal_generator: Journal entry collaborator.
        environment: Visibility and notification permission signals.
        notifier: Notification delivery (e.g. ``NotificationRouter``).
        sounds: Optional sound cue player.
        heartbeat_interval_seconds: Override the heartbeat period.
        clock: Override the heartbeat's clock.
    """

    def __init__(
        self,
        store: SessionStore,
        *,
        text_generator: TextGenerator,
        image_generator: ImageGenerator,
        proactive_generator: ProactiveGenerator,
        journal_generator: JournalGenerator,
        environment: EnvironmentSignals,
        notifier: Notifier,
        sounds: SoundCues | None = None,
        heartbeat_interval_seconds: int | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._environment = environment
        self._journal_generator = journal_generator
        self._location: Location | None = None
        self.gate = GenerationGate()
        self.pipeline = MessagePipeline(
            store,
            self.gate,
            text_generator,
            image_generator,
            sounds=sounds,
            location=lambda: self._location,
        )
        self.regeneration = RegenerationController(store, self.gate, self.pipeline)
        self.heartbeat = ProactiveHeartbeat(
            store,
            self.gate,
            self.pipeline,
            proactive_generator,
            environment,
            notifier,
            interval_seconds=heartbeat_interval_seconds,
            clock=clock,
        )

    # -- Lifecycle -------------------------------------------------------------

    async def start(self) -> None:
        await self.heartbeat.start()

    async def dispose(self) -> None:
        """Stop the heartbeat and flush the session to durable storage."""
        await self.heartbeat.stop()
        await self._store.flush()

    # -- Session access --------------------------------------------------------

    def read(self) -> Session:
        return self._store.read()

    def update(self, transform: Transform) -> Session:
        return self._store.update(transform)

    @property
    def is_generating(self) -> bool:
        return self.pipeline.is_generating

    # -- Conversation ----------------------------------------------------------

    async def handle_user_turn(self, message: Message) -> bool:
        return await self.pipeline.handle_user_turn(message)

    async def regenerate(self, message_id: str) -> bool:
        return await self.regeneration.regenerate(message_id)

    def update_message_text(self, message_id: str, text: str) -> None:
        self._store.update(transforms.edit_message_text(message_id, text))

    def update_image_tags(self, message_id: str, tags: list[str]) -> None:
        self._store.update(transforms.set_image_tags(message_id, tags))

    def set_user_location(self, location: Location | None) -> None:
        self._location = location

    @property
    def user_location(self) -> Location | None:
        return self._location

    # -- Memories --------------------------------------------------------------

    def add_memory(self, content: str) -> None:
        self._store.update(transforms.add_memory(content))

    def update_memory(self, memory_id: str, content: str) -> None:
        self._store.update(transforms.update_memory(memory_id, content))

    def delete_memory(self, memory_id: str) -> None:
        self._store.update(transforms.delete_memory(memory_id))

    # -- Journal ---------------------------------------------------------------

    def add_journal_entry(self, content: str) -> None:
        self._store.update(transforms.add_journal_entry(content))

    def update_journal_entry(self, entry_id: str, content: str) -> None:
        self._store.update(transforms.update_journal_entry(entry_id, content))

    async def write_journal_entry(self) -> str | None:
        """Have the companion write a journal entry. Returns it, or None on skip/failure."""
        if self.gate.busy:
            logger.info("Journal entry skipped: generation in progress")
            return None
        with self.gate.generating.hold():
            try:
                content = await self._journal_generator(self._store.read())
            except Exception:
                logger.exception("Journal generation failed")
                return None
        self.add_journal_entry(content)
        return content

    # -- Permissions -----------------------------------------------------------

    async def allow_permissions(self) -> Permission:
        """Ask for notification permission; turn proactive messages on if granted."""
        status = self._environment.notification_permission()
        if status == Permission.DEFAULT:
            status = await self._environment.request_notification_permission()
            if status == Permission.GRANTED:
                self._store.update(transforms.enable_notifications())
                logger.info("Notifications enabled (occasionally)")
        return status
