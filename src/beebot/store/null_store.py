"""
Run store used in test mode.

It never has a previous run and discards every record, so a test run leaves
no trace in the baseline used by live runs.
"""

import logging
from typing import Optional

from beebot.contracts import RunStore
from beebot.domain import RunRecord

# Module logger
logger = logging.getLogger(__name__)


class NullRunStore(RunStore):
    """A RunStore that stores nothing."""

    async def get_previous(self) -> Optional[RunRecord]:
        return None

    async def save(self, record: RunRecord) -> bool:
        logger.info(f"[test mode] Skipping persistence of {record}")
        return False
