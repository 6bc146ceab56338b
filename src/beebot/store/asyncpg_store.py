"""
PostgreSQL run store implementation using asyncpg.

This module persists one row per run in the append-only 'activity_logs' table
and reads back the newest row for trend detection. The database is optional:
when the pool could not be created the store behaves as an empty store, and
every database error is logged rather than propagated.
"""

import asyncio
import logging
from typing import Optional

from asyncpg import Pool, Record, exceptions

from beebot.contracts import RunStore
from beebot.domain import RunRecord

# Module logger
logger = logging.getLogger(__name__)

CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS activity_logs (
        id          SERIAL PRIMARY KEY,
        payments    INTEGER     NOT NULL,
        vouchers    INTEGER     NOT NULL,
        pdf_count   INTEGER     NOT NULL,
        email_count INTEGER     NOT NULL,
        website_ok  BOOLEAN     NOT NULL,
        slack_sent  BOOLEAN     NOT NULL,
        email_sent  BOOLEAN     NOT NULL,
        datetime    TIMESTAMPTZ DEFAULT NOW()
    );
"""

SELECT_LAST_SQL = """
    SELECT id, payments, vouchers, pdf_count, email_count,
           website_ok, slack_sent, email_sent, datetime
    FROM activity_logs
    ORDER BY id DESC
    LIMIT 1;
"""

INSERT_SQL = """
    INSERT INTO activity_logs (payments, vouchers, pdf_count, email_count,
                               website_ok, slack_sent, email_sent)
    VALUES ($1, $2, $3, $4, $5, $6, $7);
"""


def map_record(record: Record) -> RunRecord:
    """
    Converts a database row to a RunRecord domain object.

    Args:
        record: A row of the 'activity_logs' table.

    Returns:
        RunRecord: The persisted run.
    """
    return RunRecord(
        id=record["id"],
        payments=record["payments"],
        vouchers=record["vouchers"],
        pdf_count=record["pdf_count"],
        email_count=record["email_count"],
        website_ok=record["website_ok"],
        slack_sent=record["slack_sent"],
        email_sent=record["email_sent"],
        created_at=record["datetime"],
    )


class PostgresRunStore(RunStore):
    """
    A RunStore writing to and reading from PostgreSQL.

    The store is accessed at most once for reading and once for writing per
    run, so it holds no lock and no buffer.
    """

    def __init__(self, pool: Optional[Pool], acquire_timeout: float = 10.0) -> None:
        """
        Initializes the store.

        Args:
            pool: The asyncpg connection pool, or None if the database is
                unreachable.
            acquire_timeout: Maximum time in seconds to wait for a connection.
        """
        self._pool: Optional[Pool] = pool
        self._acquire_timeout: float = acquire_timeout

    async def initialize(self) -> None:
        """
        Creates the 'activity_logs' table if it does not exist yet.
        """
        if self._pool is None:
            return
        try:
            async with self._pool.acquire(timeout=self._acquire_timeout) as conn:
                await conn.execute(CREATE_TABLE_SQL)
            logger.debug("Table activity_logs is ready.")
        except asyncio.TimeoutError:
            logger.error("Timeout while preparing the activity_logs table.")
        except exceptions.PostgresError as e:
            logger.error(f"Could not prepare the activity_logs table: {e}")
        except Exception as e:
            logger.error(f"An unexpected error occurred while preparing the activity_logs table: {e}")

    async def get_previous(self) -> Optional[RunRecord]:
        if self._pool is None:
            logger.info("Database unavailable. Continuing without the previous run.")
            return None

        try:
            async with self._pool.acquire(timeout=self._acquire_timeout) as conn:
                row: Optional[Record] = await conn.fetchrow(SELECT_LAST_SQL)
        except asyncio.TimeoutError:
            logger.error("Timeout while fetching the previous run.")
            return None
        except exceptions.PostgresError as e:
            logger.error(f"Database error while fetching the previous run: {e}")
            return None
        except Exception as e:
            logger.error(f"An unexpected error occurred while fetching the previous run: {e}")
            return None

        if row is None:
            logger.info("No previous run found.")
            return None

        logger.info("Fetched previous run for comparison.")
        return map_record(row)

    async def save(self, record: RunRecord) -> bool:
        if self._pool is None:
            logger.error("Database unavailable. The run was not persisted.")
            return False

        values = (
            record.payments,
            record.vouchers,
            record.pdf_count,
            record.email_count,
            record.website_ok,
            record.slack_sent,
            record.email_sent,
        )
        try:
            async with self._pool.acquire(timeout=self._acquire_timeout) as conn:
                await conn.execute(INSERT_SQL, *values)
        except asyncio.TimeoutError:
            logger.error("Timeout while persisting the run. The run was not persisted.")
            return False
        except exceptions.PostgresError as e:
            logger.error(f"Database error while persisting the run: {e}")
            return False
        except Exception as e:
            logger.error(f"An unexpected error occurred while persisting the run: {e}")
            return False

        logger.info("Results inserted into the database.")
        return True
