"""GenerationGate — advisory flags that keep generations from overlapping."""

from __future__ import annotations

import contextlib
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)


class GateBusyError(RuntimeError):
    """Raised by :meth:`GateFlag.hold` when the flag is already held."""


class GateFlag:
    """A non-reentrant, non-blocking flag.

    Callers check-then-skip: :meth:`try_acquire` never waits. All state is
    confined to the event loop, so no lock is needed.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    def try_acquire(self) -> bool:
        """Take the flag if it is free. Returns False if it was already held."""
        if self._held:
            return False
        self._held = True
        logger.debug("Gate '%s' acquired", self.name)
        return True

    def release(self) -> None:
        self._held = False
        logger.debug("Gate '%s' released", self.name)

    @contextlib.contextmanager
    def hold(self) -> Iterator[None]:
        """Hold the flag for the duration of the block, releasing on every exit."""
        if not self.try_acquire():
            msg = f"Gate '{self.name}' is already held"
            raise GateBusyError(msg)
        try:
            yield
        finally:
            self.release()


class GenerationGate:
    """The two flags shared by the pipeline and the heartbeat.

    ``generating`` is owned by manual generations; ``proactive_sending``
    guards the heartbeat's own send. The heartbeat checks ``generating``
    but never takes it.
    """

    def __init__(self) -> None:
        self.generating = GateFlag("generating")
        self.proactive_sending = GateFlag("proactive_sending")

    @property
    def busy(self) -> bool:
        """True while either a manual or a proactive generation is running."""
        return self.generating.held or self.proactive_sending.held
