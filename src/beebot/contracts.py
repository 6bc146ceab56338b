"""
Core interfaces for the Beebot monitoring pipeline.

This module defines the abstract base classes that form the seams of a run.
Each of them has a live implementation and a test-mode implementation, so a
whole run can be exercised end-to-end without touching real systems.
"""

import abc
from typing import Dict, Iterable, Optional

from .domain import ChatMessage, EmailMessage, MetricSource, PageContent, RunRecord, SourceKey


class PageFetcher(abc.ABC):
    """
    Abstract interface for a component that retrieves the monitored pages.

    Its responsibility is to encapsulate the network I/O for a set of sources
    and return the bodies of the pages that could be retrieved.
    """

    @abc.abstractmethod
    async def fetch_all(self, sources: Iterable[MetricSource]) -> Dict[SourceKey, PageContent]:
        """
        Retrieves all the given sources concurrently.

        Args:
            sources: The sources to fetch.

        Returns:
            Dict[SourceKey, PageContent]: The retrieved pages. A source that
                could not be retrieved is absent from the mapping.

        Raises:
            Exception: Implementations should handle network errors internally
                and omit the failing source rather than raising.
        """
        pass


class ChatNotifier(abc.ABC):
    """Abstract interface for the chat channel receiving every report."""

    @abc.abstractmethod
    async def send(self, message: ChatMessage) -> bool:
        """
        Delivers a chat message.

        Args:
            message: The composed chat message.

        Returns:
            bool: True if the channel accepted the message, False otherwise.
        """
        pass


class EmailNotifier(abc.ABC):
    """Abstract interface for the email channel receiving alerts."""

    @abc.abstractmethod
    async def send(self, message: EmailMessage) -> bool:
        """
        Delivers an alert email to the configured recipients.

        Args:
            message: The composed email.

        Returns:
            bool: True if the channel accepted the email, False otherwise.
        """
        pass


class RunStore(abc.ABC):
    """
    Abstract interface for the store holding past runs.

    The store is append-only. It is read at most once and written at most
    once per run, and neither operation may abort the run.
    """

    @abc.abstractmethod
    async def get_previous(self) -> Optional[RunRecord]:
        """
        Returns the most recent run record.

        Returns:
            Optional[RunRecord]: The newest record, or None if the store is
                empty or unreachable.
        """
        pass

    @abc.abstractmethod
    async def save(self, record: RunRecord) -> bool:
        """
        Appends a run record.

        Args:
            record: The record to persist.

        Returns:
            bool: True if the record was written, False otherwise.
        """
        pass
