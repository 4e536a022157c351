"""Prompt assembly from the session: persona, user profile, memories, journal."""

from __future__ import annotations

import logging
import zoneinfo
from datetime import datetime
from typing import TYPE_CHECKING, Any

from companion.config import settings

if TYPE_CHECKING:
    from companion.session.models import Location, Message, Session

logger = logging.getLogger(__name__)

PHOTO_DIRECTIVE = "[photo:"

_OOC_NOTE = (
    "Messages marked (OOC) are out-of-character: the user is talking to you "
    "about the roleplay itself. Answer those plainly, out of persona."
)

_PHOTO_NOTE = (
    "If sending a picture of yourself fits the moment, add a final line "
    f"`{PHOTO_DIRECTIVE} <description of the photo>]`. Use this sparingly."
)


def _format_memories(session: Session) -> str:
    if not session.memories:
        return ""
    lines = ["## Things you remember about them\n"]
    lines.extend(f"- {note.content}" for note in session.memories)
    return "\n".join(lines)


def _format_journal(session: Session, limit: int = 3) -> str:
    if not session.journal:
        return ""
    lines = ["## Your recent journal entries\n"]
    lines.extend(f"- ({entry.date[:10]}) {entry.content}" for entry in session.journal[:limit])
    return "\n".join(lines)


def build_system_prompt(session: Session, location: Location | None = None) -> str:
    """Assemble the system prompt for the companion persona."""
    companion = session.companion
    user = session.user

    sections = [
        f"You are {companion.name}, the user's {companion.relationship.lower()}. "
        f"{companion.persona}\n\nAppearance: {companion.appearance}",
        f"# The user\n\nName: {user.name}\n{user.bio}",
        _OOC_NOTE,
        _PHOTO_NOTE,
    ]

    memories = _format_memories(session)
    if memories:
        sections.append(memories)
    journal = _format_journal(session)
    if journal:
        sections.append(journal)

    tz = zoneinfo.ZoneInfo(settings.timezone)
    now = datetime.now(tz)
    sections.append(f"Current time: {now.strftime('%A, %B %d, %Y %I:%M %p %Z')}")

    if location is not None:
        sections.append(
            f"The user is near latitude {location.latitude:.4f}, "
            f"longitude {location.longitude:.4f}."
        )

    return "\n\n---\n\n".join(sections)


def to_api_messages(history: list[Message], limit: int | None = None) -> list[dict[str, Any]]:
    """Format chat history for the Claude API.

    Consecutive turns from the same sender are merged, and the list always
    starts with a user turn, as the API requires.
    """
    limit = limit or settings.max_context_messages
    result: list[dict[str, Any]] = []
    for message in history[-limit:]:
        role = "user" if message.sender == "user" else "assistant"
        text = f"(OOC) {message.text}" if message.ooc else message.text
        if result and result[-1]["role"] == role:
            result[-1]["content"] += f"\n\n{text}"
        else:
            result.append({"role": role, "content": text})
    while result and result[0]["role"] != "user":
        result.pop(0)
    return result
