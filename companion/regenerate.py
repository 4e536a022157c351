"""RegenerationController — discard an answer and ask again."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from companion.session.transforms import truncate_history

if TYPE_CHECKING:
    from companion.gate import GenerationGate
    from companion.pipeline import MessagePipeline
    from companion.session.store import SessionStore

logger = logging.getLogger(__name__)


class RegenerationController:
    """Rewinds the chat to just before an assistant message and replays its prompt."""

    def __init__(
        self, store: SessionStore, gate: GenerationGate, pipeline: MessagePipeline
    ) -> None:
        self._store = store
        self._gate = gate
        self._pipeline = pipeline

    async def regenerate(self, message_id: str) -> bool:
        """Regenerate the assistant message *message_id*.

        No-op (returns False) if the message is missing, first in history,
        not from the assistant, or a generation is already running.
        """
        if self._gate.busy:
            logger.debug("Regenerate %s skipped: generation in progress", message_id)
            return False

        session = self._store.read()
        index = session.find_message(message_id)
        if index <= 0 or session.chat_history[index].sender != "assistant":
            logger.debug("Regenerate %s skipped: not a replayable answer", message_id)
            return False

        user_prompt = session.chat_history[index - 1]
        self._store.update(truncate_history(index))
        logger.info(
            "Regenerating reply to %s (dropped %d message(s))",
            user_prompt.id,
            len(session.chat_history) - index,
        )

        # The truncation is committed before the replay reads the live session.
        return await self._pipeline.trigger_response(user_prompt)
