"""Default generation collaborators for the pipeline, heartbeat and journal.

Each function matches the signature the orchestrator expects and raises on
failure; callers decide whether to fall back, skip or log.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from companion.llm import client
from companion.llm.prompt import PHOTO_DIRECTIVE, build_system_prompt, to_api_messages
from companion.session.models import TextResponse

if TYPE_CHECKING:
    from companion.session.models import Location, Message, Session

logger = logging.getLogger(__name__)

PROACTIVE_INSTRUCTION = (
    "The user hasn't written in a while. Send them one short, natural message "
    "to check in, the way {name} would text a {relationship}. Reply with the "
    "message only."
)

JOURNAL_INSTRUCTION = (
    "Write today's private journal entry as {name}: a few sentences reflecting "
    "on your recent conversations with {user}. Reply with the entry only."
)


def split_photo_directive(text: str) -> tuple[str, str | None]:
    """Strip a trailing ``[photo: ...]`` line from *text*.

    Returns the remaining text and the photo prompt (or None).
    """
    kept: list[str] = []
    prompt = None
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.lower().startswith(PHOTO_DIRECTIVE) and stripped.endswith("]"):
            prompt = stripped[len(PHOTO_DIRECTIVE) : -1].strip() or None
            continue
        kept.append(line)
    return "\n".join(kept).strip(), prompt


def _photo_prompt(session: Session, prompt: str) -> str:
    companion = session.companion
    return f"{prompt}. Subject: {companion.appearance} Style: {companion.art_style}."


async def generate_image(prompt: str, session: Session) -> str:
    """Render *prompt* in the companion's art style. Returns an image URL."""
    return await client.create_image(_photo_prompt(session, prompt))


async def generate_text_response(
    message: Message, session: Session, location: Location | None = None
) -> TextResponse:
    """Reply to *message* in persona. *session* already contains *message*."""
    messages = to_api_messages(session.chat_history)
    if not messages:
        messages = [{"role": "user", "content": message.text}]

    raw = await client.complete_text(messages, system=build_system_prompt(session, location))
    text, photo = split_photo_directive(raw)

    response = TextResponse(text=text, ooc=message.ooc)
    if photo and not message.ooc:
        try:
            response.image_url = await generate_image(photo, session)
            response.image_prompt = photo
        except Exception:
            logger.exception("Inline photo generation failed; replying with text only")
    return response


async def generate_proactive_message(session: Session) -> str:
    instruction = PROACTIVE_INSTRUCTION.format(
        name=session.companion.name,
        relationship=session.companion.relationship.lower(),
    )
    messages = to_api_messages(session.chat_history)
    if messages and messages[-1]["role"] == "user":
        messages[-1]["content"] += f"\n\n(OOC) {instruction}"
    else:
        messages.append({"role": "user", "content": f"(OOC) {instruction}"})
    return (await client.complete_text(messages, system=build_system_prompt(session))).strip()


async def generate_journal_entry(session: Session) -> str:
    instruction = JOURNAL_INSTRUCTION.format(
        name=session.companion.name, user=session.user.name
    )
    transcript = "\n".join(
        f"{session.user.name if m.sender == 'user' else session.companion.name}: {m.text}"
        for m in session.chat_history[-20:]
    )
    content = f"{instruction}\n\nRecent conversation:\n{transcript or '(none yet)'}"
    messages = [{"role": "user", "content": content}]
    return (await client.complete_text(messages, system=build_system_prompt(session))).strip()
