"""Session data model — the single aggregate of companion and user state."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_COMPANION_NAME = "Aria"


def now_iso() -> str:
    """Current UTC time as an ISO 8601 string."""
    return datetime.now(UTC).isoformat()


def make_id(prefix: str) -> str:
    """Build an id like ``ai-1718000000000-3fa2b1`` (sender, millis, suffix)."""
    millis = int(datetime.now(UTC).timestamp() * 1000)
    return f"{prefix}-{millis}-{uuid.uuid4().hex[:6]}"


class Frequency(StrEnum):
    OFF = "off"
    RARELY = "rarely"
    OCCASIONALLY = "occasionally"
    FREQUENTLY = "frequently"
    VERY_FREQUENTLY = "very_frequently"


# Minimum idle time before a proactive message may fire, per tier.
NOTIFICATION_INTERVALS: dict[Frequency, timedelta] = {
    Frequency.RARELY: timedelta(hours=6),
    Frequency.OCCASIONALLY: timedelta(hours=2),
    Frequency.FREQUENTLY: timedelta(minutes=45),
    Frequency.VERY_FREQUENTLY: timedelta(minutes=10),
}


class CompanionSettings(BaseModel):
    name: str = DEFAULT_COMPANION_NAME
    persona: str = "A witty, empathetic, and slightly sarcastic AI companion."
    appearance: str = "A person with kind eyes and a warm smile."
    relationship: str = "Best Friend"
    reference_image: str | None = None
    art_style: str = "photorealistic"


class UserSettings(BaseModel):
    name: str = "User"
    bio: str = "A curious and adventurous person."


class MemoryNote(BaseModel):
    """A long-term fact the companion keeps about the user."""

    id: str
    date: str = Field(default_factory=now_iso)
    content: str


class ImageAttachment(BaseModel):
    """A generated photo attached to a message.

    Attributes:
        src: Image reference (URL or ``data:`` URI).
        prompt: The prompt that produced the image.
        timestamp: ISO 8601 creation time.
        context: Recent conversation text the photo was taken in, if any.
        tags: Free-form gallery tags.
    """

    src: str
    prompt: str
    timestamp: str = Field(default_factory=now_iso)
    context: str | None = None
    tags: list[str] = Field(default_factory=list)


class GroundingSource(BaseModel):
    uri: str
    title: str = ""


class Message(BaseModel):
    """A single chat message.

    Once appended, only ``text`` and ``image.tags`` may change, and only
    through a session transform.
    """

    id: str
    sender: Literal["user", "assistant"]
    text: str
    timestamp: str = Field(default_factory=now_iso)
    ooc: bool = False
    image: ImageAttachment | None = None
    grounding: list[GroundingSource] | None = None
    link: str | None = None
    model_url: str | None = None

    @classmethod
    def user(cls, text: str, *, ooc: bool = False) -> Message:
        return cls(id=make_id("user"), sender="user", text=text, ooc=ooc)

    @classmethod
    def assistant(cls, text: str, *, prefix: str = "ai", **fields) -> Message:
        return cls(id=make_id(prefix), sender="assistant", text=text, **fields)

    @property
    def created_at(self) -> datetime:
        ts = datetime.fromisoformat(self.timestamp)
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=UTC)
        return ts


class JournalEntry(BaseModel):
    id: str
    date: str = Field(default_factory=now_iso)
    content: str


class TTSConfig(BaseModel):
    enabled: bool = False
    gender: Literal["female", "male"] = "female"
    pitch: float = 0.0
    speed: float = 1.0


class NotificationsConfig(BaseModel):
    """Proactive message settings.

    A tier this version does not know is kept as its raw string so the
    rest of the session still loads; the heartbeat gives it a default interval.
    """

    enabled: bool = False
    frequency: Frequency | str = Frequency.OFF

    @field_validator("frequency")
    @classmethod
    def _known_tier(cls, value: Frequency | str) -> Frequency | str:
        try:
            return Frequency(value)
        except ValueError:
            return value


class InterfaceSettings(BaseModel):
    ui_sounds: bool = True


class Location(BaseModel):
    latitude: float
    longitude: float


class TextResponse(BaseModel):
    """What the text generator returns for a conversational turn."""

    text: str
    grounding: list[GroundingSource] | None = None
    ooc: bool = False
    model_url: str | None = None
    link: str | None = None
    image_url: str | None = None
    image_prompt: str | None = None


def _seed_memories() -> list[MemoryNote]:
    return [
        MemoryNote(id="mem-1", content="Loves classical music."),
        MemoryNote(id="mem-2", content="Is allergic to cats."),
        MemoryNote(id="mem-3", content="Studying to be an architect."),
    ]


class Session(BaseModel):
    """Everything the companion knows about one user.

    Exactly one exists per running instance; it is replaced wholesale by
    :meth:`companion.session.store.SessionStore.update`.
    """

    companion: CompanionSettings = Field(default_factory=CompanionSettings)
    user: UserSettings = Field(default_factory=UserSettings)
    memories: list[MemoryNote] = Field(default_factory=list)
    chat_history: list[Message] = Field(default_factory=list)
    journal: list[JournalEntry] = Field(default_factory=list)
    tts: TTSConfig = Field(default_factory=TTSConfig)
    notifications: NotificationsConfig = Field(default_factory=NotificationsConfig)
    interface: InterfaceSettings = Field(default_factory=InterfaceSettings)

    @classmethod
    def default(cls) -> Session:
        """Initial state for a first run."""
        return cls(memories=_seed_memories())

    @property
    def last_message(self) -> Message | None:
        return self.chat_history[-1] if self.chat_history else None

    def find_message(self, message_id: str) -> int:
        """Index of *message_id* in the chat history, or -1."""
        for index, message in enumerate(self.chat_history):
            if message.id == message_id:
                return index
        return -1
