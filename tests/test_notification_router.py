"""Tests for NotificationRouter."""

import pytest

from companion.notifications.channels import NotificationChannel
from companion.notifications.router import NotificationRouter

# -- Helpers -----------------------------------------------------------------


class FakeChannel:
    """Minimal channel implementation for testing."""

    def __init__(self, channel_name: str = "fake") -> None:
        self._name = channel_name
        self.shown: list[tuple[str, str, str | None]] = []

    @property
    def name(self) -> str:
        return self._name

    async def show(self, title: str, body: str, icon: str | None = None) -> bool:
        self.shown.append((title, body, icon))
        return True


class FailChannel(FakeChannel):
    """Channel that always fails to deliver."""

    async def show(self, title: str, body: str, icon: str | None = None) -> bool:
        return False


# -- Fixtures ----------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_router():
    """Reset the singleton before and after each test."""
    NotificationRouter._reset()
    yield
    NotificationRouter._reset()


# -- Registration ------------------------------------------------------------


def test_fake_channel_satisfies_protocol() -> None:
    assert isinstance(FakeChannel(), NotificationChannel)


def test_register_duplicate_raises() -> None:
    router = NotificationRouter.get()
    router.register_channel(FakeChannel("webhook"))
    with pytest.raises(ValueError, match="already registered"):
        router.register_channel(FakeChannel("webhook"))


# -- Default channel ---------------------------------------------------------


def test_set_default_unregistered_raises() -> None:
    router = NotificationRouter.get()
    with pytest.raises(KeyError, match="not registered"):
        router.set_default_channel("missing")


# -- Singleton ---------------------------------------------------------------


def test_singleton_same_instance() -> None:
    assert NotificationRouter.get() is NotificationRouter.get()


def test_reset_creates_new_instance() -> None:
    a = NotificationRouter.get()
    NotificationRouter._reset()
    assert NotificationRouter.get() is not a


# -- Show dispatch -----------------------------------------------------------


async def test_show_via_default_channel() -> None:
    router = NotificationRouter.get()
    ch = FakeChannel("webhook")
    router.register_channel(ch)
    router.set_default_channel("webhook")

    ok = await router.show("Aria", "miss you!", "https://img.example/aria.png")
    assert ok is True
    assert ch.shown == [("Aria", "miss you!", "https://img.example/aria.png")]


async def test_default_channel_wins_over_others() -> None:
    router = NotificationRouter.get()
    hook = FakeChannel("webhook")
    log = FakeChannel("log")
    router.register_channel(log)
    router.register_channel(hook)
    router.set_default_channel("log")

    assert await router.show("Aria", "hey") is True
    assert log.shown == [("Aria", "hey", None)]
    assert hook.shown == []


async def test_show_fallback_to_only_channel() -> None:
    router = NotificationRouter.get()
    ch = FakeChannel("log")
    router.register_channel(ch)

    assert await router.show("Aria", "hi") is True
    assert len(ch.shown) == 1


async def test_show_no_channel_returns_false() -> None:
    router = NotificationRouter.get()
    assert await router.show("Aria", "hi") is False


async def test_show_ambiguous_no_default_returns_false() -> None:
    router = NotificationRouter.get()
    router.register_channel(FakeChannel("a"))
    router.register_channel(FakeChannel("b"))
    assert await router.show("Aria", "hi") is False


async def test_show_reports_channel_failure() -> None:
    router = NotificationRouter.get()
    router.register_channel(FailChannel("webhook"))
    assert await router.show("Aria", "hi") is False
