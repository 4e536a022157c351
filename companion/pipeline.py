"""MessagePipeline — turns one user message into one assistant message."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from companion.session.models import ImageAttachment, Message, now_iso
from companion.session.transforms import append_message

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from companion.environment import SoundCues
    from companion.gate import GenerationGate
    from companion.session.models import Location, Session, TextResponse
    from companion.session.store import SessionStore

    TextGenerator = Callable[[Message, Session, Location | None], Awaitable[TextResponse]]
    ImageGenerator = Callable[[str, Session], Awaitable[str]]

logger = logging.getLogger(__name__)

IMAGE_TRIGGER = "generate a photo:"
PHOTO_ACK_TEXT = "Here is the photo you requested:"
FALLBACK_TEXT = "Sorry, I'm having a bit of trouble connecting right now."


def parse_image_request(message: Message) -> str | None:
    """Return the photo prompt if *message* asks for one, else None."""
    if message.ooc or not message.text.lower().startswith(IMAGE_TRIGGER):
        return None
    return message.text[len(IMAGE_TRIGGER) :].strip()


class MessagePipeline:
    """Appends user messages and generates the companion's reply.

    Args:
        store: Live session store; read on every call, never cached.
        gate: Shared generation gate.
        text_generator: Async ``(message, session, location)`` → ``TextResponse``.
        image_generator: Async ``(prompt, session)`` → image URL.
        sounds: Optional sound cue player.
        location: Zero-arg callable returning the last known location.
    """

    def __init__(
        self,
        store: SessionStore,
        gate: GenerationGate,
        text_generator: TextGenerator,
        image_generator: ImageGenerator,
        sounds: SoundCues | None = None,
        location: Callable[[], Location | None] | None = None,
    ) -> None:
        self._store = store
        self._gate = gate
        self._text_generator = text_generator
        self._image_generator = image_generator
        self._sounds = sounds
        self._location = location or (lambda: None)

    @property
    def is_generating(self) -> bool:
        return self._gate.busy

    def add_message(self, message: Message) -> None:
        """Append *message* to the chat history, then play the matching cue."""
        session = self._store.update(append_message(message))
        if self._sounds is None or not session.interface.ui_sounds:
            return
        try:
            if message.sender == "user":
                self._sounds.play_sent()
            else:
                self._sounds.play_received()
        except Exception:
            logger.exception("Sound cue failed for message %s", message.id)

    async def handle_user_turn(self, message: Message) -> bool:
        """Append a freshly typed user message and reply to it.

        Returns False (and appends nothing) while a generation is running.
        """
        if self._gate.busy:
            logger.warning("Generation in progress; ignoring user turn %s", message.id)
            return False
        self.add_message(message)
        return await self.trigger_response(message)

    async def trigger_response(self, message: Message) -> bool:
        """Generate and append the reply to *message*, which is already in history."""
        if self._gate.busy:
            logger.warning("Generation in progress; not responding to %s", message.id)
            return False
        with self._gate.generating.hold():
            try:
                prompt = parse_image_request(message)
                if prompt is not None:
                    await self._respond_with_photo(message, prompt)
                else:
                    await self._respond_with_text(message)
            except Exception:
                logger.exception("Generation failed for message %s", message.id)
                self.add_message(Message.assistant(FALLBACK_TEXT))
        return True

    async def _respond_with_photo(self, message: Message, prompt: str) -> None:
        logger.info("Photo request (%d chars prompt)", len(prompt))
        image_url = await self._image_generator(prompt, self._store.read())
        image = ImageAttachment(src=image_url, prompt=message.text, timestamp=now_iso())
        self.add_message(Message.assistant(PHOTO_ACK_TEXT, image=image))

    async def _respond_with_text(self, message: Message) -> None:
        response = await self._text_generator(message, self._store.read(), self._location())
        reply = Message.assistant(
            response.text,
            grounding=response.grounding,
            ooc=response.ooc,
            model_url=response.model_url,
            link=response.link,
        )
        if response.image_url and response.image_prompt:
            recent = self._store.read().chat_history[-2:]
            reply.image = ImageAttachment(
                src=response.image_url,
                prompt=response.image_prompt,
                timestamp=now_iso(),
                context="\n".join(m.text for m in recent),
            )
        logger.info("Reply generated (%d chars)", len(response.text))
        self.add_message(reply)
