"""
Main entry point for the Beebot monitoring application.

This module runs a single monitoring pass. It sets up logging, creates the
HTTP session and database pool, wires either the live or the test-mode
components into the pipeline, and releases every resource on exit. It is
meant to be invoked periodically by an external scheduler.
"""

import asyncio
import logging
import sys
from typing import Optional

import aiohttp
import asyncpg

from beebot.config import RunContext, get_context, get_policy, get_sources, validate_context
from beebot.config.db_config import initiate_db_pool
from beebot.config.http_config import get_basic_auth, get_http_session
from beebot.config.logging_config import configure_logging
from beebot.errors import ConfigurationError
from beebot.fetcher.aiohttp_fetcher import AiohttpFetcher
from beebot.fetcher.canned_fetcher import CannedFetcher
from beebot.notifier.log_notifier import LogChatNotifier, LogEmailNotifier
from beebot.notifier.sendgrid_notifier import SendgridNotifier
from beebot.notifier.slack_notifier import SlackNotifier
from beebot.pipeline import MonitoringRun
from beebot.store.asyncpg_store import PostgresRunStore
from beebot.store.null_store import NullRunStore


def build_test_run(context: RunContext) -> MonitoringRun:
    """
    Wire a run against canned pages, with dry-run notifiers and no persistence.

    Args:
        context: Configuration context containing all application settings.

    Returns:
        MonitoringRun: The pipeline, ready to execute.
    """
    return MonitoringRun(
        sources=get_sources(context),
        fetcher=CannedFetcher(),
        policy=get_policy(context),
        chat_notifier=LogChatNotifier(),
        email_notifier=LogEmailNotifier(),
        store=NullRunStore(),
        test_mode=True,
    )


def build_live_run(
    context: RunContext,
    http_session: aiohttp.ClientSession,
    store: PostgresRunStore,
) -> MonitoringRun:
    """
    Wire a run against the real dashboards, channels and database.

    Args:
        context: Configuration context containing all application settings.
        http_session: The session shared by the fetcher and the notifiers.
        store: The run store backed by the database.

    Returns:
        MonitoringRun: The pipeline, ready to execute.
    """
    return MonitoringRun(
        sources=get_sources(context),
        fetcher=AiohttpFetcher(
            session=http_session,
            max_timeout=context.max_timeout,
            api_token=context.api_token,
            basic_auth=get_basic_auth(context),
        ),
        policy=get_policy(context),
        chat_notifier=SlackNotifier(
            session=http_session, token=context.slack_token, channel=context.slack_channel
        ),
        email_notifier=SendgridNotifier(
            session=http_session,
            token=context.sendgrid_token,
            sender=context.mail_sender,
            recipients=context.mail_recipients,
        ),
        store=store,
    )


async def main(context: RunContext) -> None:
    """
    Set up and execute one monitoring run.

    Args:
        context: Configuration context containing all application settings.

    Returns:
        None
    """
    logger: logging.Logger = logging.getLogger(__name__)
    logger.info("Beebot starting")

    if context.test_mode:
        logger.info("Test mode: using canned pages, nothing is sent or persisted.")
        await build_test_run(context).execute()
        logger.info("Beebot shutdown")
        return

    http_session: aiohttp.ClientSession = get_http_session(context)
    logger.info("configured: http_session")

    logger.info("Connecting to db")
    db_pool: Optional[asyncpg.pool.Pool] = await initiate_db_pool(context)

    try:
        store = PostgresRunStore(db_pool)
        await store.initialize()
        report = await build_live_run(context, http_session, store).execute()
        logger.info(
            f"Run complete (slack sent: {report.chat_sent}, email sent: {report.email_sent}, "
            f"saved: {report.saved})"
        )
    finally:
        # Ensure all resources are properly closed during shutdown
        logger.info("Shutting down resources...")
        await http_session.close()
        if db_pool is not None:
            await db_pool.close()
        logger.info("Beebot shutdown")


def run() -> None:
    """Console script entry point."""
    try:
        # Parse command-line arguments and environment variables
        beebot_context: RunContext = get_context()
        validate_context(beebot_context)

        # Configure logging based on the context
        configure_logging(beebot_context)

        # Run the main application
        asyncio.run(main(beebot_context))
    except ConfigurationError as e:
        sys.exit(f"Configuration error: {e}")
    except KeyboardInterrupt:
        logging.info("Shutdown initiated by user (Ctrl+C).")


if __name__ == "__main__":
    run()
