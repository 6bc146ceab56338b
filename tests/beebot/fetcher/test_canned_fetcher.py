"""
Unit tests for the CannedFetcher class.
"""

import pytest

from beebot.domain import AuthMode, MetricSource, SourceKey
from beebot.fetcher.canned_fetcher import GOLDEN_PAGES, CannedFetcher

SOURCES = [
    MetricSource(key, f"https://example.com/{key.value}/", AuthMode.NONE) for key in SourceKey
]


@pytest.mark.asyncio
async def test_fetch_all_should_serve_every_golden_page() -> None:
    """
    Tests that the default fetcher answers for every source with its golden page.
    """
    # Arrange
    fetcher = CannedFetcher()

    # Act
    result = await fetcher.fetch_all(SOURCES)

    # Assert
    assert set(result) == set(SourceKey)
    assert result[SourceKey.CELERY].body == GOLDEN_PAGES[SourceKey.CELERY]
    assert result[SourceKey.CELERY].url == "https://example.com/celery/"


@pytest.mark.asyncio
async def test_fetch_all_should_leave_out_missing_sources() -> None:
    """
    Tests that sources declared missing simulate unavailable pages.
    """
    # Arrange
    fetcher = CannedFetcher(missing=[SourceKey.PAYMENTS])

    # Act
    result = await fetcher.fetch_all(SOURCES)

    # Assert
    assert SourceKey.PAYMENTS not in result
    assert len(result) == len(SourceKey) - 1


@pytest.mark.asyncio
async def test_fetch_all_should_use_custom_pages() -> None:
    # Arrange
    fetcher = CannedFetcher(pages={SourceKey.PURCHASE_WEBSITE: "<h1>Maintenance</h1>"})

    # Act
    result = await fetcher.fetch_all(SOURCES)

    # Assert
    assert list(result) == [SourceKey.PURCHASE_WEBSITE]
    assert result[SourceKey.PURCHASE_WEBSITE].body == "<h1>Maintenance</h1>"
