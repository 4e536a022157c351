"""Tests for the session data model."""

from datetime import UTC, datetime

from companion.session.models import (
    Frequency,
    ImageAttachment,
    Message,
    NotificationsConfig,
    Session,
    make_id,
)
from tests.conftest import T0, make_message


def test_make_id_shape() -> None:
    prefix, millis, suffix = make_id("ai-proactive").rsplit("-", 2)
    assert prefix == "ai-proactive"
    assert millis.isdigit()
    assert len(suffix) == 6


def test_ids_are_unique_within_a_millisecond() -> None:
    assert len({make_id("user") for _ in range(50)}) == 50


def test_message_constructors() -> None:
    user = Message.user("hi", ooc=True)
    assert user.sender == "user"
    assert user.ooc is True
    assert user.id.startswith("user-")

    image = ImageAttachment(src="https://img.example/1.png", prompt="a cat")
    reply = Message.assistant("look", image=image)
    assert reply.sender == "assistant"
    assert reply.id.startswith("ai-")
    assert reply.image.tags == []


def test_created_at_is_timezone_aware() -> None:
    assert make_message("u1", timestamp=T0).created_at == T0

    naive = Message(id="u2", sender="user", text="x", timestamp="2025-01-01T12:00:00")
    assert naive.created_at == datetime(2025, 1, 1, 12, tzinfo=UTC)


def test_default_session() -> None:
    session = Session.default()
    assert session.companion.name == "Aria"
    assert session.companion.relationship == "Best Friend"
    assert [m.id for m in session.memories] == ["mem-1", "mem-2", "mem-3"]
    assert session.chat_history == []
    assert session.notifications == NotificationsConfig(enabled=False, frequency=Frequency.OFF)
    assert session.interface.ui_sounds is True


def test_find_message_and_last_message() -> None:
    session = Session(chat_history=[make_message("u1"), make_message("a1", "assistant")])
    assert session.find_message("a1") == 1
    assert session.find_message("missing") == -1
    assert session.last_message.id == "a1"
    assert Session().last_message is None


def test_json_round_trip_keeps_frequency() -> None:
    session = Session(notifications=NotificationsConfig(enabled=True, frequency="frequently"))
    restored = Session.model_validate_json(session.model_dump_json())
    assert restored.notifications.frequency is Frequency.FREQUENTLY


def test_unknown_frequency_is_kept_raw() -> None:
    config = NotificationsConfig.model_validate({"enabled": True, "frequency": "hourly"})
    assert config.frequency == "hourly"
    assert not isinstance(config.frequency, Frequency)
    assert NotificationsConfig(frequency="rarely").frequency is Frequency.RARELY
