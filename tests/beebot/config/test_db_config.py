"""
Tests for the db_config module in the beebot.config package.

This module contains tests for the initiate_db_pool function, which creates
and validates a connection pool to the PostgreSQL database.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from beebot.config.db_config import initiate_db_pool
from beebot.config.run_context import RunContext


def _mock_pool(connection: AsyncMock) -> MagicMock:
    pool = MagicMock()
    pool.acquire.return_value.__aenter__.return_value = connection
    pool.close = AsyncMock()
    return pool


class TestInitiateDbPool:
    """Tests for the initiate_db_pool function."""

    @pytest.mark.asyncio
    async def test_initiate_db_pool_should_create_and_validate_pool(
        self, context: RunContext
    ) -> None:
        """
        Test that the pool is created from the context and validated with a query.
        """
        # Arrange
        connection = AsyncMock()
        connection.fetchval.return_value = 1
        pool = _mock_pool(connection)

        with patch("asyncpg.create_pool", AsyncMock(return_value=pool)) as mock_create_pool:
            # Act
            result = await initiate_db_pool(context)

        # Assert
        mock_create_pool.assert_awaited_once_with(
            dsn=context.dsn, min_size=1, max_size=context.db_pool_size
        )
        connection.fetchval.assert_awaited_once_with("SELECT 1")
        assert result is pool

    @pytest.mark.asyncio
    async def test_initiate_db_pool_should_close_pool_and_return_none_on_validation_error(
        self, context: RunContext
    ) -> None:
        """
        Test that a pool failing its validation query is closed and not returned.
        """
        # Arrange
        connection = AsyncMock()
        connection.fetchval.side_effect = OSError("Connection error")
        pool = _mock_pool(connection)

        with patch("asyncpg.create_pool", AsyncMock(return_value=pool)):
            # Act
            result = await initiate_db_pool(context)

        # Assert
        assert result is None
        pool.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_initiate_db_pool_should_return_none_when_creation_fails(
        self, context: RunContext
    ) -> None:
        """
        Test that an unreachable database does not raise.
        """
        # Arrange
        with patch("asyncpg.create_pool", AsyncMock(side_effect=OSError("refused"))):
            # Act
            result = await initiate_db_pool(context)

        # Assert
        assert result is None
