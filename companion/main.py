"""Companion entry point — a console host around the orchestrator."""

from __future__ import annotations

import asyncio
import logging

from companion.config import settings
from companion.environment import HeadlessEnvironment, Visibility
from companion.llm import generation
from companion.notifications import LogChannel, NotificationRouter, WebhookChannel
from companion.orchestrator import CompanionOrchestrator
from companion.session.durable import SqliteSessionDurable
from companion.session.models import Message, Session
from companion.session.store import SessionStore

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, settings.log_level),
)
logger = logging.getLogger(__name__)

HELP = (
    "Commands: /regen (redo last answer), /journal, /remember <fact>, "
    "/away, /back, /allow, /quit. Prefix a message with (ooc) to step out of character."
)


def _build_router() -> NotificationRouter:
    router = NotificationRouter.get()
    router.register_channel(LogChannel())
    if settings.notification_webhook_url:
        router.register_channel(WebhookChannel())
        router.set_default_channel("webhook")
    else:
        router.set_default_channel("log")
    return router


class ConsoleView:
    """Prints each new assistant message as the session changes."""

    def __init__(self) -> None:
        self._last_shown: str | None = None

    def __call__(self, session: Session) -> None:
        last = session.last_message
        if last is None or last.sender != "assistant" or last.id == self._last_shown:
            return
        self._last_shown = last.id
        print(f"\n{session.companion.name}: {last.text}")
        if last.image is not None:
            print(f"  [photo: {last.image.prompt}]")


async def _dispatch(
    orchestrator: CompanionOrchestrator, env: HeadlessEnvironment, line: str
) -> bool:
    """Handle one input line. Returns False to quit."""
    if line == "/quit":
        return False
    if line == "/away":
        env.current_visibility = Visibility.HIDDEN
    elif line == "/back":
        env.current_visibility = Visibility.VISIBLE
    elif line == "/allow":
        print(f"Notifications: {await orchestrator.allow_permissions()}")
    elif line == "/regen":
        last = orchestrator.read().last_message
        if last is not None:
            await orchestrator.regenerate(last.id)
    elif line == "/journal":
        entry = await orchestrator.write_journal_entry()
        print(entry or "(no journal entry)")
    elif line.startswith("/remember "):
        orchestrator.add_memory(line.removeprefix("/remember ").strip())
    elif line.startswith("/"):
        print(HELP)
    elif line:
        env.current_visibility = Visibility.VISIBLE
        ooc = line.lower().startswith("(ooc)")
        text = line[5:].strip() if ooc else line
        await orchestrator.handle_user_turn(Message.user(text, ooc=ooc))
    return True


async def run() -> None:
    store = await SessionStore.open(SqliteSessionDurable())
    env = HeadlessEnvironment()
    orchestrator = CompanionOrchestrator(
        store,
        text_generator=generation.generate_text_response,
        image_generator=generation.generate_image,
        proactive_generator=generation.generate_proactive_message,
        journal_generator=generation.generate_journal_entry,
        environment=env,
        notifier=_build_router(),
    )
    store.subscribe(ConsoleView())
    await orchestrator.start()
    print(HELP)
    try:
        while True:
            line = (await asyncio.to_thread(input, "> ")).strip()
            if not await _dispatch(orchestrator, env, line):
                break
    except (EOFError, KeyboardInterrupt):
        pass
    finally:
        await orchestrator.dispose()


def main() -> None:
    """Start the companion in the terminal."""
    if not settings.anthropic_api_key:
        logger.warning("ANTHROPIC_API_KEY is empty — replies will fall back to an apology")
    logger.info("Starting companion with model %s...", settings.claude_model)
    asyncio.run(run())


if __name__ == "__main__":
    main()
