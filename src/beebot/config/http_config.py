"""
HTTP client configuration module for the Beebot monitoring system.

This module provides functionality to create the HTTP client session shared by
the fetcher and the notifiers of a run, and the Basic credentials of the worker
queue dashboard.
"""

import logging
from typing import Optional

import aiohttp

from beebot.config import RunContext
from beebot.config.constants import DEFAULT_USER_AGENT

# Module logger
logger = logging.getLogger(__name__)


def get_http_session(context: RunContext) -> aiohttp.ClientSession:
    """
    Create and configure an HTTP client session based on the provided configuration.

    The session timeout bounds every request, including notification calls.

    Args:
        context: Configuration context containing HTTP client settings.

    Returns:
        aiohttp.ClientSession: A configured HTTP client session.
    """
    return aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=context.max_timeout),
        headers={"User-Agent": DEFAULT_USER_AGENT},
    )


def get_basic_auth(context: RunContext) -> Optional[aiohttp.BasicAuth]:
    """
    Build the Basic credentials of the worker queue dashboard.

    Args:
        context: Configuration context containing the credentials.

    Returns:
        Optional[aiohttp.BasicAuth]: The credentials, or None if no user is configured.
    """
    if not context.celery_username:
        logger.warning("No worker queue credentials configured.")
        return None
    return aiohttp.BasicAuth(context.celery_username, context.celery_password)
