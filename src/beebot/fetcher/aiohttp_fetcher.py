"""
HTTP fetcher implementation using the aiohttp library.

This module provides an implementation of the PageFetcher interface that uses
the aiohttp library to retrieve every monitored page concurrently. A failing
source is logged and left out of the result, so a single unavailable page
never aborts a run.
"""

import asyncio
import logging
import time
from typing import Dict, Iterable, List, Optional, Tuple

import aiohttp

from beebot.contracts import PageFetcher
from beebot.domain import AuthMode, MetricSource, PageContent, SourceKey

# Module logger
logger = logging.getLogger(__name__)


def _is_success(status: int) -> bool:
    return 200 <= status < 300


class AiohttpFetcher(PageFetcher):
    """
    A concrete implementation of PageFetcher using the aiohttp library.

    This class issues one GET request per source, all of them concurrently,
    with the authentication each source requires. It uses a shared aiohttp
    ClientSession for the whole run.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        max_timeout: int,
        api_token: str,
        basic_auth: Optional[aiohttp.BasicAuth] = None,
    ) -> None:
        """
        Initializes the fetcher with a shared aiohttp ClientSession.

        Args:
            session: An active aiohttp.ClientSession to be used for requests.
            max_timeout: Maximum duration in seconds of a single request.
            api_token: Token sent as a bearer credential to API-key sources.
            basic_auth: Credentials for sources using HTTP Basic authentication.
        """
        self._session: aiohttp.ClientSession = session
        self._timeout = aiohttp.ClientTimeout(total=max_timeout)
        self._api_token: str = api_token
        self._basic_auth: Optional[aiohttp.BasicAuth] = basic_auth

    def _auth_for(self, source: MetricSource) -> Tuple[Dict[str, str], Optional[aiohttp.BasicAuth]]:
        """
        Returns the headers and Basic credentials to use for a source.
        """
        if source.auth_mode == AuthMode.BEARER:
            return {"Authorization": f"Bearer {self._api_token}"}, None
        if source.auth_mode == AuthMode.BASIC:
            return {}, self._basic_auth
        return {}, None

    async def fetch(self, source: MetricSource) -> Optional[PageContent]:
        """
        Retrieves a single source.

        Args:
            source: The source to retrieve.

        Returns:
            Optional[PageContent]: The page, or None if the request failed or
                the response status was not in the 2xx range.
        """
        logger.debug(f"Starting fetch for source {source.key.value}: {source.url}")
        headers, auth = self._auth_for(source)
        start_time: float = time.time()

        try:
            async with self._session.get(
                source.url,
                headers=headers,
                auth=auth,
                timeout=self._timeout,
            ) as response:
                if not _is_success(response.status):
                    logger.error(
                        f"Fetching {source.key.value} failed with status {response.status}"
                    )
                    return None
                body: str = await response.text()
        except asyncio.TimeoutError:
            logger.error(f"Timeout fetching {source.key.value} ({source.url})")
            return None
        except Exception:
            logger.exception(f"Error fetching {source.key.value} ({source.url})")
            return None

        logger.debug(
            f"Successfully fetched {source.key.value} in {(time.time() - start_time):.3f}s"
        )
        return PageContent(url=source.url, body=body)

    async def fetch_all(self, sources: Iterable[MetricSource]) -> Dict[SourceKey, PageContent]:
        """
        Retrieves every source concurrently and waits for all of them.

        Args:
            sources: The sources to fetch.

        Returns:
            Dict[SourceKey, PageContent]: The pages that were retrieved.
        """
        source_list: List[MetricSource] = list(sources)
        pages: List[Optional[PageContent]] = await asyncio.gather(
            *[self.fetch(source) for source in source_list]
        )

        results: Dict[SourceKey, PageContent] = {}
        for source, page in zip(source_list, pages):
            if page is not None:
                results[source.key] = page

        missing = [source.key.value for source in source_list if source.key not in results]
        if missing:
            logger.warning(f"Unavailable sources for this run: {', '.join(missing)}")
        logger.info(f"Fetched {len(results)}/{len(source_list)} pages.")
        return results
