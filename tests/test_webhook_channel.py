"""Tests for WebhookChannel and LogChannel."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx

from companion.notifications.channels import NotificationChannel
from companion.notifications.webhook_channel import LogChannel, WebhookChannel

URL = "https://relay.example/notify"


def _mock_httpx_client(mock_client_cls: MagicMock, response: httpx.Response) -> AsyncMock:
    """Wire up an AsyncClient context-manager mock that returns *response*."""
    mock_client = AsyncMock()
    mock_client.post.return_value = response
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    mock_client_cls.return_value = mock_client
    return mock_client


def _response(status: int, text: str = "") -> httpx.Response:
    return httpx.Response(status_code=status, text=text, request=httpx.Request("POST", URL))


def test_channels_satisfy_protocol() -> None:
    assert isinstance(WebhookChannel(URL), NotificationChannel)
    assert isinstance(LogChannel(), NotificationChannel)
    assert WebhookChannel(URL).name == "webhook"
    assert LogChannel().name == "log"


class TestWebhookChannel:
    async def test_posts_payload(self) -> None:
        with patch("companion.notifications.webhook_channel.httpx.AsyncClient") as mock_cls:
            client = _mock_httpx_client(mock_cls, _response(200))
            ok = await WebhookChannel(URL).show("Aria", "thinking of you", "data:image/png;base64,A")

        assert ok is True
        client.post.assert_awaited_once_with(
            URL,
            json={"title": "Aria", "body": "thinking of you", "icon": "data:image/png;base64,A"},
        )

    async def test_missing_url_returns_false(self) -> None:
        with (
            patch("companion.notifications.webhook_channel.settings") as mock_settings,
            patch("companion.notifications.webhook_channel.httpx.AsyncClient") as mock_cls,
        ):
            mock_settings.notification_webhook_url = ""
            ok = await WebhookChannel().show("Aria", "hi")

        assert ok is False
        mock_cls.assert_not_called()

    async def test_error_status_returns_false(self) -> None:
        with patch("companion.notifications.webhook_channel.httpx.AsyncClient") as mock_cls:
            _mock_httpx_client(mock_cls, _response(500, "boom"))
            ok = await WebhookChannel(URL).show("Aria", "hi")

        assert ok is False

    async def test_network_error_returns_false(self) -> None:
        with patch("companion.notifications.webhook_channel.httpx.AsyncClient") as mock_cls:
            client = _mock_httpx_client(mock_cls, _response(200))
            client.post.side_effect = httpx.ConnectError("refused")
            ok = await WebhookChannel(URL).show("Aria", "hi")

        assert ok is False


async def test_log_channel_always_succeeds() -> None:
    assert await LogChannel().show("Aria", "hi") is True
