"""SessionStore — the single live handle on the current session."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from companion.config import settings
from companion.session.models import Session

if TYPE_CHECKING:
    from collections.abc import Callable

    from companion.session.durable import SessionDurable
    from companion.session.transforms import Transform

logger = logging.getLogger(__name__)


class SessionStore:
    """Holds the current ``Session`` and funnels every mutation through ``update``.

    Long-lived consumers (the heartbeat, the pipeline) keep a reference to
    the store and call :meth:`read` whenever they need state, so they always
    see the latest snapshot.

    Args:
        initial: Starting snapshot.
        durable: Optional persistence backend; saved after every update.
        key: Key under which the session is persisted.
    """

    def __init__(
        self,
        initial: Session | None = None,
        durable: SessionDurable | None = None,
        key: str | None = None,
    ) -> None:
        self._current = initial or Session.default()
        self._durable = durable
        self._key = key or settings.session_key
        self._observers: list[Callable[[Session], None]] = []
        self._save_task: asyncio.Task | None = None
        self._dirty = False

    @classmethod
    async def open(cls, durable: SessionDurable, key: str | None = None) -> SessionStore:
        """Load the persisted session (or a fresh default) and wrap it in a store."""
        key = key or settings.session_key
        try:
            loaded = await durable.load(key)
        except Exception:
            logger.exception("Failed to load session '%s'; starting fresh", key)
            loaded = None
        if loaded is None:
            logger.info("No saved session under '%s'; using defaults", key)
        else:
            logger.info("Loaded session '%s' (%d messages)", key, len(loaded.chat_history))
        return cls(initial=loaded, durable=durable, key=key)

    # -- Read / write ----------------------------------------------------------

    def read(self) -> Session:
        """Return the current snapshot."""
        return self._current

    def update(self, transform: Transform) -> Session:
        """Apply *transform* to the latest snapshot and publish the result.

        If the transform raises, the current snapshot is left as it was.
        """
        updated = transform(self._current)
        self._current = updated
        for observer in list(self._observers):
            try:
                observer(updated)
            except Exception:
                logger.exception("Session observer failed")
        self._schedule_save()
        return updated

    def subscribe(self, observer: Callable[[Session], None]) -> Callable[[], None]:
        """Call *observer* with each new snapshot. Returns an unsubscribe function."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    # -- Persistence -----------------------------------------------------------

    def _schedule_save(self) -> None:
        if self._durable is None:
            return
        self._dirty = True
        if self._save_task is not None and not self._save_task.done():
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running loop; session save deferred to flush()")
            return
        self._save_task = loop.create_task(self._save_latest())

    async def _save_latest(self) -> None:
        """Write the newest snapshot until no update arrived during the write."""
        while self._dirty:
            self._dirty = False
            snapshot = self._current
            try:
                await self._durable.save(self._key, snapshot)
            except Exception:
                logger.exception("Failed to persist session '%s'", self._key)

    async def flush(self) -> None:
        """Wait until the latest snapshot has been handed to the durable store."""
        if self._durable is None:
            return
        if self._save_task is not None and not self._save_task.done():
            await self._save_task
        if self._dirty:
            await self._save_latest()
