"""
Database configuration module for the Beebot monitoring system.

This module provides functionality to create and validate a connection pool
to the PostgreSQL database using the asyncpg library. An unreachable database
must not stop a run, so a failed connection is logged and reported as None.
"""

import logging
from typing import Optional

import asyncpg

from beebot.config import RunContext

# Module logger
logger = logging.getLogger(__name__)


async def initiate_db_pool(context: RunContext) -> Optional[asyncpg.pool.Pool]:
    """
    Create and validate a connection pool to the PostgreSQL database.

    This function creates a connection pool using the provided configuration,
    then validates that the database is accessible by executing a simple query.
    If the connection fails, the pool is closed and None is returned.

    Args:
        context: Configuration context containing database connection parameters.

    Returns:
        Optional[asyncpg.pool.Pool]: A connection pool, or None if the database
            could not be reached.
    """
    try:
        # Create the connection pool with the specified parameters
        pool: asyncpg.pool.Pool = await asyncpg.create_pool(
            dsn=context.dsn, min_size=1, max_size=context.db_pool_size
        )
    except Exception as e:
        logger.error(f"Error: Could not connect to the database. {e}")
        return None

    try:
        # Validate the connection by executing a simple query
        async with pool.acquire() as connection:
            await connection.fetchval("SELECT 1")
        logger.info("Database connection pool successfully created.")
        return pool
    except Exception as e:
        logger.error(f"Error: Could not connect to the database. {e}")
        await pool.close()
        return None
