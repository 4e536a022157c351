"""Shared test fixtures."""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from companion.environment import HeadlessEnvironment, Permission, Visibility
from companion.gate import GenerationGate
from companion.pipeline import MessagePipeline
from companion.session.models import Message, Session, TextResponse
from companion.session.store import SessionStore

T0 = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)


def make_message(
    message_id: str,
    sender: str = "user",
    text: str | None = None,
    timestamp: datetime = T0,
    **kwargs,
) -> Message:
    return Message(
        id=message_id,
        sender=sender,
        text=text if text is not None else f"text of {message_id}",
        timestamp=timestamp.isoformat(),
        **kwargs,
    )


@pytest.fixture
def store() -> SessionStore:
    """An in-memory store with an empty session (no persistence)."""
    return SessionStore(initial=Session())


@pytest.fixture
def gate() -> GenerationGate:
    return GenerationGate()


@pytest.fixture
def text_generator() -> AsyncMock:
    return AsyncMock(return_value=TextResponse(text="hello from the companion"))


@pytest.fixture
def image_generator() -> AsyncMock:
    return AsyncMock(return_value="https://img.example/fox.png")


@pytest.fixture
def pipeline(
    store: SessionStore,
    gate: GenerationGate,
    text_generator: AsyncMock,
    image_generator: AsyncMock,
) -> MessagePipeline:
    return MessagePipeline(store, gate, text_generator, image_generator)


@pytest.fixture
def environment() -> HeadlessEnvironment:
    """Hidden window, notifications granted — the heartbeat's happy path."""
    return HeadlessEnvironment(Visibility.HIDDEN, Permission.GRANTED)


@pytest.fixture(autouse=False)
def _no_turso(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure tests use local file, not remote Turso."""
    monkeypatch.setattr("companion.config.settings.turso_database_url", "")
