"""Pure ``Session -> Session`` transforms applied through the store.

Every function returns a new ``Session``; the input snapshot is never
mutated, so observers holding an older snapshot keep a consistent view.
"""

from __future__ import annotations

from collections.abc import Callable

from companion.session.models import (
    Frequency,
    JournalEntry,
    MemoryNote,
    Message,
    NotificationsConfig,
    Session,
    make_id,
)

Transform = Callable[[Session], Session]


# -- Chat ------------------------------------------------------------------


def append_message(message: Message) -> Transform:
    def apply(session: Session) -> Session:
        return session.model_copy(update={"chat_history": [*session.chat_history, message]})

    return apply


def truncate_history(index: int) -> Transform:
    """Keep only the messages strictly before *index*."""

    def apply(session: Session) -> Session:
        return session.model_copy(update={"chat_history": session.chat_history[:index]})

    return apply


def edit_message_text(message_id: str, text: str) -> Transform:
    def apply(session: Session) -> Session:
        history = [
            m.model_copy(update={"text": text}) if m.id == message_id else m
            for m in session.chat_history
        ]
        return session.model_copy(update={"chat_history": history})

    return apply


def set_image_tags(message_id: str, tags: list[str]) -> Transform:
    """Replace the tags of a message's image. Messages without one are untouched."""

    def apply(session: Session) -> Session:
        history = []
        for m in session.chat_history:
            if m.id == message_id and m.image is not None:
                image = m.image.model_copy(update={"tags": list(tags)})
                m = m.model_copy(update={"image": image})
            history.append(m)
        return session.model_copy(update={"chat_history": history})

    return apply


# -- Memories --------------------------------------------------------------


def add_memory(content: str) -> Transform:
    def apply(session: Session) -> Session:
        note = MemoryNote(id=make_id("mem"), content=content)
        return session.model_copy(update={"memories": [note, *session.memories]})

    return apply


def update_memory(memory_id: str, content: str) -> Transform:
    def apply(session: Session) -> Session:
        memories = [
            m.model_copy(update={"content": content}) if m.id == memory_id else m
            for m in session.memories
        ]
        return session.model_copy(update={"memories": memories})

    return apply


def delete_memory(memory_id: str) -> Transform:
    def apply(session: Session) -> Session:
        memories = [m for m in session.memories if m.id != memory_id]
        return session.model_copy(update={"memories": memories})

    return apply


# -- Journal ---------------------------------------------------------------


def add_journal_entry(content: str) -> Transform:
    def apply(session: Session) -> Session:
        entry = JournalEntry(id=make_id("journal"), content=content)
        return session.model_copy(update={"journal": [entry, *session.journal]})

    return apply


def update_journal_entry(entry_id: str, content: str) -> Transform:
    def apply(session: Session) -> Session:
        journal = [
            j.model_copy(update={"content": content}) if j.id == entry_id else j
            for j in session.journal
        ]
        return session.model_copy(update={"journal": journal})

    return apply


# -- Settings --------------------------------------------------------------


def enable_notifications(frequency: Frequency = Frequency.OCCASIONALLY) -> Transform:
    def apply(session: Session) -> Session:
        config = NotificationsConfig(enabled=True, frequency=frequency)
        return session.model_copy(update={"notifications": config})

    return apply
