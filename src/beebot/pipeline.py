"""
Core pipeline of the Beebot monitoring system.

This module provides the MonitoringRun class, which orchestrates one run by
coordinating the fetcher, the extraction and classification steps, the
notifiers and the run store. A failure in any single source, channel or store
operation degrades the report but never aborts the run.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from .classifier import Classifier
from .composer import compose_chat_message, compose_email
from .contracts import ChatNotifier, EmailNotifier, PageFetcher, RunStore
from .domain import (
    ChatMessage,
    EmailMessage,
    MetricSnapshot,
    MetricSource,
    RunRecord,
    RunReport,
    ThresholdPolicy,
    Trend,
)
from .extractor import extract_snapshot
from .trend import compare


def build_run_record(snapshot: MetricSnapshot, slack_sent: bool, email_sent: bool) -> RunRecord:
    """
    Builds the record persisted for a run.

    Metrics that were not fetched are stored as zero or False, since every
    column is NOT NULL. The next run cannot tell such a zero from a real one,
    so its trend against a real count reads as increasing.

    Args:
        snapshot: The values extracted during the run.
        slack_sent: Whether the chat message was delivered.
        email_sent: Whether the alert email was delivered.

    Returns:
        RunRecord: The record to append to the run store.
    """
    return RunRecord(
        id=None,
        payments=snapshot.payments.validated if snapshot.payments else 0,
        vouchers=snapshot.vouchers.paid if snapshot.vouchers else 0,
        pdf_count=snapshot.pdf_count or 0,
        email_count=snapshot.emails.sent if snapshot.emails else 0,
        website_ok=snapshot.is_purchase_website_ok,
        slack_sent=slack_sent,
        email_sent=email_sent,
    )


class MonitoringRun:
    """
    Coordinates a single fetch, classify, notify and persist cycle.

    Every collaborator is injected, so the same pipeline runs against live
    systems or against canned pages and dry-run notifiers.
    """

    def __init__(
        self,
        sources: Sequence[MetricSource],
        fetcher: PageFetcher,
        policy: ThresholdPolicy,
        chat_notifier: ChatNotifier,
        email_notifier: EmailNotifier,
        store: RunStore,
        test_mode: bool = False,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """
        Initializes a new MonitoringRun instance.

        Args:
            sources: The pages to monitor.
            fetcher: Component that retrieves the pages.
            policy: The thresholds used for classification.
            chat_notifier: Channel receiving every report.
            email_notifier: Channel receiving alerts only.
            store: Store providing the previous run and persisting this one.
            test_mode: Whether the run uses canned data.
            clock: Returns the local time of the run.
        """
        self._sources: List[MetricSource] = list(sources)
        self._fetcher: PageFetcher = fetcher
        self._classifier: Classifier = Classifier(policy)
        self._chat_notifier: ChatNotifier = chat_notifier
        self._email_notifier: EmailNotifier = email_notifier
        self._store: RunStore = store
        self._test_mode: bool = test_mode
        self._clock: Callable[[], datetime] = clock
        self._logger: logging.Logger = logging.getLogger(__name__)

    async def execute(self) -> RunReport:
        """
        Runs the whole pipeline once.

        Returns:
            RunReport: The outcomes of the run and the delivery results.
        """
        now: datetime = self._clock()

        # 1. Fetch and extract
        self._logger.info("Fetching pages content")
        pages = await self._fetcher.fetch_all(self._sources)
        snapshot: MetricSnapshot = extract_snapshot(pages, self._sources)

        # 2. Classify and compare with the previous run
        self._logger.info("Validating data from HTML content")
        outcomes = self._classifier.classify(snapshot, now)
        previous: Optional[RunRecord] = await self._store.get_previous()
        trends: List[Trend] = [compare(outcome, previous) for outcome in outcomes]

        for outcome, trend in zip(outcomes, trends):
            self._logger.info(
                f"{outcome.name}: {outcome.severity.value} ({trend.value}) {outcome.message}"
            )

        # 3. Deliver
        chat_message: ChatMessage = compose_chat_message(outcomes, trends, now, self._test_mode)
        self._logger.info("Sending Slack message")
        chat_sent: bool = await self._chat_notifier.send(chat_message)

        email_sent = False
        email: Optional[EmailMessage] = compose_email(outcomes, now, self._test_mode)
        if email is not None:
            self._logger.info("Sending alert email")
            email_sent = await self._email_notifier.send(email)
        else:
            self._logger.info("No alert. Email not sent.")

        # 4. Persist
        record: RunRecord = build_run_record(snapshot, chat_sent, email_sent)
        saved: bool = await self._store.save(record)

        return RunReport(
            outcomes=outcomes,
            trends=trends,
            chat_sent=chat_sent,
            email_sent=email_sent,
            record=record,
            saved=saved,
        )
