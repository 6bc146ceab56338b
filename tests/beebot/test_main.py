"""
Tests for the entry point module of the beebot package.
"""

from typing import Callable
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from beebot.__main__ import build_live_run, build_test_run, main, run
from beebot.config.run_context import RunContext
from beebot.domain import Severity
from beebot.fetcher.aiohttp_fetcher import AiohttpFetcher
from beebot.fetcher.canned_fetcher import CannedFetcher
from beebot.notifier.log_notifier import LogChatNotifier
from beebot.notifier.sendgrid_notifier import SendgridNotifier
from beebot.notifier.slack_notifier import SlackNotifier
from beebot.store.asyncpg_store import PostgresRunStore
from beebot.store.null_store import NullRunStore


@pytest.mark.asyncio
async def test_build_test_run_should_execute_without_side_effects(
    context_factory: Callable[..., RunContext],
) -> None:
    """
    Tests that a test run reports the canned pages and persists nothing.
    """
    # Arrange
    monitoring_run = build_test_run(context_factory(test_mode=True))

    # Act
    report = await monitoring_run.execute()

    # Assert
    assert isinstance(monitoring_run._fetcher, CannedFetcher)
    assert isinstance(monitoring_run._chat_notifier, LogChatNotifier)
    assert isinstance(monitoring_run._store, NullRunStore)
    assert report.chat_sent is True
    assert report.saved is False
    assert all(outcome.severity != Severity.ALERT for outcome in report.outcomes)


def test_build_live_run_should_wire_live_components(context: RunContext) -> None:
    # Arrange
    session = MagicMock()
    store = PostgresRunStore(None)

    # Act
    monitoring_run = build_live_run(context, session, store)

    # Assert
    assert isinstance(monitoring_run._fetcher, AiohttpFetcher)
    assert isinstance(monitoring_run._chat_notifier, SlackNotifier)
    assert isinstance(monitoring_run._email_notifier, SendgridNotifier)
    assert monitoring_run._store is store


@pytest.mark.asyncio
async def test_main_should_release_resources_after_a_live_run(context: RunContext) -> None:
    """
    Tests that the session and the pool are closed once the run is over.
    """
    # Arrange
    session = MagicMock()
    session.close = AsyncMock()
    pool = MagicMock()
    pool.close = AsyncMock()
    monitoring_run = MagicMock()
    monitoring_run.execute = AsyncMock()

    with (
        patch("beebot.__main__.get_http_session", return_value=session),
        patch("beebot.__main__.initiate_db_pool", AsyncMock(return_value=pool)),
        patch("beebot.__main__.PostgresRunStore") as mock_store_class,
        patch("beebot.__main__.build_live_run", return_value=monitoring_run),
    ):
        mock_store_class.return_value.initialize = AsyncMock()

        # Act
        await main(context)

    # Assert
    monitoring_run.execute.assert_awaited_once()
    session.close.assert_awaited_once()
    pool.close.assert_awaited_once()


def test_run_should_exit_on_configuration_error(
    context_factory: Callable[..., RunContext],
) -> None:
    # Arrange
    incomplete = context_factory(slack_token="")

    with patch("beebot.__main__.get_context", return_value=incomplete):
        # Act & Assert
        with pytest.raises(SystemExit):
            run()
