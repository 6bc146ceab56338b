"""
Unit tests for the SlackNotifier class.

The tests follow the Arrange-Act-Assert (AAA) pattern and mock the aiohttp
ClientSession used to call the Slack Web API.
"""

from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest
import pytest_asyncio

from beebot.domain import ChatMessage
from beebot.notifier.slack_notifier import SLACK_POST_MESSAGE_URL, SlackNotifier


def _response(status: int = 200, body: Dict[str, Any] = None) -> MagicMock:
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value={"ok": True} if body is None else body)
    context_manager = MagicMock()
    context_manager.__aenter__.return_value = response
    return context_manager


@pytest_asyncio.fixture
async def mock_session() -> MagicMock:
    session = MagicMock()
    session.post.return_value = _response()
    return session


@pytest_asyncio.fixture
async def notifier(mock_session: MagicMock) -> SlackNotifier:
    return SlackNotifier(session=mock_session, token="xoxb-token", channel="C0123")


@pytest.fixture
def message() -> ChatMessage:
    blocks = [{"type": "section", "text": {"type": "mrkdwn", "text": "*Report Time: 09:05*"}}]
    return ChatMessage(text="*Report Time: 09:05*", blocks=blocks)


@pytest.mark.asyncio
async def test_send_should_post_the_message_to_the_channel(
    notifier: SlackNotifier, mock_session: MagicMock, message: ChatMessage
) -> None:
    """
    Tests the request sent to chat.postMessage.
    """
    # Act
    result = await notifier.send(message)

    # Assert
    assert result is True
    call_args = mock_session.post.call_args
    assert call_args[0][0] == SLACK_POST_MESSAGE_URL
    assert call_args[1]["json"] == {
        "channel": "C0123",
        "text": message.text,
        "blocks": message.blocks,
    }
    assert call_args[1]["headers"] == {"Authorization": "Bearer xoxb-token"}


@pytest.mark.asyncio
async def test_send_should_fail_when_slack_reports_an_error(
    notifier: SlackNotifier, mock_session: MagicMock, message: ChatMessage
) -> None:
    """
    Tests that a 200 answer with 'ok: false' is not a delivery.
    """
    # Arrange
    mock_session.post.return_value = _response(body={"ok": False, "error": "channel_not_found"})

    # Act
    result = await notifier.send(message)

    # Assert
    assert result is False


@pytest.mark.asyncio
async def test_send_should_fail_on_non_success_status(
    notifier: SlackNotifier, mock_session: MagicMock, message: ChatMessage
) -> None:
    """
    Tests that a non-2xx answer is not a delivery, whatever its body.
    """
    # Arrange
    context_manager = _response(status=500)
    mock_session.post.return_value = context_manager

    # Act
    result = await notifier.send(message)

    # Assert
    assert result is False
    context_manager.__aenter__.return_value.json.assert_not_awaited()


@pytest.mark.asyncio
async def test_send_should_not_raise_on_connection_error(
    notifier: SlackNotifier, mock_session: MagicMock, message: ChatMessage
) -> None:
    """
    Tests that transport errors are reported as a failed delivery.
    """
    # Arrange
    mock_session.post.side_effect = aiohttp.ClientConnectionError("unreachable")

    # Act
    result = await notifier.send(message)

    # Assert
    assert result is False
