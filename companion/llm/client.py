"""Async API clients for the generation backends (Anthropic text, OpenAI images)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import anthropic

from companion.config import settings

if TYPE_CHECKING:
    from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

_client: anthropic.AsyncAnthropic | None = None
_image_client: AsyncOpenAI | None = None


def _get_client() -> anthropic.AsyncAnthropic:
    """Lazily initialize the Anthropic client."""
    global _client  # noqa: PLW0603
    if _client is None:
        _client = anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key)
    return _client


def _get_image_client() -> AsyncOpenAI:
    """Return a lazily-initialised AsyncOpenAI singleton."""
    global _image_client  # noqa: PLW0603
    if _image_client is None:
        from openai import AsyncOpenAI

        _image_client = AsyncOpenAI(api_key=settings.openai_api_key)
    return _image_client


async def complete_text(
    messages: list[dict[str, Any]],
    *,
    system: str | list[dict[str, Any]] | None = None,
    model: str | None = None,
    max_tokens: int = 1024,
) -> str:
    """Single-shot Claude call — no tools, no streaming."""
    client = _get_client()
    kwargs: dict[str, Any] = {
        "model": model or settings.claude_model,
        "max_tokens": max_tokens,
        "messages": messages,
    }
    if system is not None:
        kwargs["system"] = system
    response = await client.messages.create(**kwargs)
    text = "".join(block.text for block in response.content if block.type == "text")
    logger.debug("Claude returned %d chars", len(text))
    return text


async def create_image(prompt: str, *, size: str = "1024x1024", quality: str = "medium") -> str:
    """Generate one image and return it as a ``data:`` URI.

    Raises:
        RuntimeError: The API answered without image data.
    """
    client = _get_image_client()
    response = await client.images.generate(
        model=settings.image_model,
        prompt=prompt,
        size=size,
        quality=quality,
        n=1,
    )
    image_b64 = response.data[0].b64_json
    if not image_b64:
        msg = "No image data returned from OpenAI"
        raise RuntimeError(msg)
    return f"data:image/png;base64,{image_b64}"
