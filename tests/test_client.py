"""Tests for the Anthropic and OpenAI client wrappers."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from companion.config import settings
from companion.llm.client import complete_text, create_image


def _anthropic_client(*blocks: SimpleNamespace) -> MagicMock:
    mock_client = MagicMock()
    mock_client.messages.create = AsyncMock(return_value=SimpleNamespace(content=list(blocks)))
    return mock_client


async def test_complete_text_basic() -> None:
    mock_client = _anthropic_client(SimpleNamespace(type="text", text="hello world"))

    with patch("companion.llm.client._get_client", return_value=mock_client):
        result = await complete_text([{"role": "user", "content": "hi"}])

    assert result == "hello world"
    call_kwargs = mock_client.messages.create.call_args.kwargs
    assert call_kwargs["messages"] == [{"role": "user", "content": "hi"}]
    assert call_kwargs["model"] == settings.claude_model
    assert call_kwargs["max_tokens"] == 1024
    assert "system" not in call_kwargs


async def test_complete_text_with_system_and_model() -> None:
    mock_client = _anthropic_client(SimpleNamespace(type="text", text="response"))

    with patch("companion.llm.client._get_client", return_value=mock_client):
        await complete_text(
            [{"role": "user", "content": "hi"}],
            system="You are Aria.",
            model="claude-haiku-4-5-20251001",
        )

    call_kwargs = mock_client.messages.create.call_args.kwargs
    assert call_kwargs["system"] == "You are Aria."
    assert call_kwargs["model"] == "claude-haiku-4-5-20251001"


async def test_complete_text_joins_text_blocks_only() -> None:
    mock_client = _anthropic_client(
        SimpleNamespace(type="text", text="Hello "),
        SimpleNamespace(type="thinking", thinking="hmm"),
        SimpleNamespace(type="text", text="there"),
    )

    with patch("companion.llm.client._get_client", return_value=mock_client):
        result = await complete_text([{"role": "user", "content": "hi"}])

    assert result == "Hello there"


def _image_client(b64: str | None) -> MagicMock:
    mock_client = MagicMock()
    mock_client.images.generate = AsyncMock(
        return_value=SimpleNamespace(data=[SimpleNamespace(b64_json=b64)])
    )
    return mock_client


async def test_create_image_returns_data_uri() -> None:
    mock_client = _image_client("aGVsbG8=")

    with patch("companion.llm.client._get_image_client", return_value=mock_client):
        uri = await create_image("a fox in the snow")

    assert uri == "data:image/png;base64,aGVsbG8="
    call_kwargs = mock_client.images.generate.call_args.kwargs
    assert call_kwargs["model"] == settings.image_model
    assert call_kwargs["prompt"] == "a fox in the snow"
    assert call_kwargs["size"] == "1024x1024"


async def test_create_image_without_data_raises() -> None:
    with (
        patch("companion.llm.client._get_image_client", return_value=_image_client(None)),
        pytest.raises(RuntimeError, match="No image data"),
    ):
        await create_image("a fox")
