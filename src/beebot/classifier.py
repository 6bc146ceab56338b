"""
Threshold classification of the extracted metrics.

This module maps every metric of a MetricSnapshot to a ValidationOutcome
using a ThresholdPolicy. The active threshold depends on the hour of the run,
and the expected totals of some metrics are read from sibling values of the
snapshot. Classification is a pure function of its inputs and never raises:
missing data always resolves to an Alert explaining what is missing.
"""

import logging
from datetime import datetime
from typing import List, Optional

from beebot.domain import (
    EmailCounts,
    MetricId,
    MetricSnapshot,
    PaymentCounts,
    Severity,
    ThresholdPolicy,
    ValidationOutcome,
    VoucherCounts,
)

# Module logger
logger = logging.getLogger(__name__)

NOT_AVAILABLE = "NOT AVAILABLE"


def _count(value: int) -> str:
    return f"`{value}`"


def _cutoff(value: float) -> str:
    return f"`{value:g}`"


def _unavailable(metric: MetricId, url: Optional[str], reason: str = NOT_AVAILABLE) -> ValidationOutcome:
    return ValidationOutcome(
        metric=metric, severity=Severity.ALERT, message=reason, value=None, url=url
    )


class Classifier:
    """
    Classifies a snapshot against a threshold policy.

    Counts with a known expected total are judged against two cutoffs: the
    'ok' cutoff (ok_ratio percent of the total) and the 'warning' cutoff (the
    active threshold percent of the total). Percentage metrics are only Ok at
    100 percent. Boolean metrics are Ok when true.
    """

    def __init__(self, policy: ThresholdPolicy) -> None:
        """
        Initializes the classifier.

        Args:
            policy: The thresholds to apply.
        """
        self._policy: ThresholdPolicy = policy

    def classify(self, snapshot: MetricSnapshot, now: datetime) -> List[ValidationOutcome]:
        """
        Classifies every metric of a snapshot.

        Args:
            snapshot: The values extracted during the run.
            now: The local time of the run, used to pick the day or night threshold.

        Returns:
            List[ValidationOutcome]: One outcome per metric, in display order.
        """
        threshold: int = self._policy.active_threshold(now.hour)
        logger.debug(f"Classifying snapshot with a threshold of {threshold}% at {now:%H:%M}")
        urls = snapshot.source_urls

        return [
            self._classify_payments(
                snapshot.payments, threshold, urls.get(MetricId.VALIDATED_PAYMENTS)
            ),
            self._classify_vouchers(snapshot.vouchers, threshold, urls.get(MetricId.PAID_VOUCHERS)),
            self._classify_pdf(
                snapshot.pdf_count,
                snapshot.not_imported_count,
                threshold,
                urls.get(MetricId.PDF_COUNT),
            ),
            self._classify_emails(
                snapshot.emails,
                snapshot.not_imported_count,
                threshold,
                urls.get(MetricId.EMAIL_COUNT),
            ),
            self._classify_status(
                MetricId.PURCHASE_WEBSITE,
                snapshot.is_purchase_website_ok,
                "is OK",
                "is DOWN",
                urls.get(MetricId.PURCHASE_WEBSITE),
            ),
            self._classify_status(
                MetricId.WORKER_QUEUE,
                snapshot.is_worker_queue_online,
                "all workers online",
                "workers OFFLINE",
                urls.get(MetricId.WORKER_QUEUE),
            ),
        ]

    def _severity_for_count(self, value: int, denominator: int, threshold: int) -> Severity:
        if value >= denominator * self._policy.ok_ratio / 100:
            return Severity.OK
        if value >= denominator * threshold / 100:
            return Severity.WARNING
        return Severity.ALERT

    def _count_message(self, value: int, denominator: int, threshold: int, severity: Severity) -> str:
        message = f"{_count(value)} / {_count(denominator)}"
        if severity == Severity.WARNING:
            message += f" (< {_cutoff(denominator * self._policy.ok_ratio / 100)})"
        elif severity == Severity.ALERT:
            message += f" (< {_cutoff(denominator * threshold / 100)})"
        return message

    def _classify_count(
        self,
        metric: MetricId,
        value: Optional[int],
        denominator: int,
        threshold: int,
        url: Optional[str],
        details: str = "",
    ) -> ValidationOutcome:
        """
        Classifies a count against an expected total read from the data.

        A total of zero gives no basis for a ratio, so the metric is reported
        as not available rather than as zero percent.
        """
        if value is None:
            return _unavailable(metric, url)
        if denominator <= 0:
            return _unavailable(metric, url, f"{NOT_AVAILABLE} (no expected total)")

        severity = self._severity_for_count(value, denominator, threshold)
        message = self._count_message(value, denominator, threshold, severity) + details
        return ValidationOutcome(
            metric=metric, severity=severity, message=message, value=value, url=url
        )

    def _classify_payments(
        self, payments: Optional[PaymentCounts], threshold: int, url: Optional[str]
    ) -> ValidationOutcome:
        if payments is None:
            return _unavailable(MetricId.VALIDATED_PAYMENTS, url)

        # Grouped payments are not expected to be validated on their own.
        denominator = self._policy.payments_page_size - payments.group
        details = (
            f" · to validate: {_count(payments.to_validate)}"
            f" · 3-D Secure: {_count(payments.threed_secure)}"
            f" · cancelled: {_count(payments.cancelled)}"
            f" · error: {_count(payments.error)}"
            f" · grouped: {_count(payments.group)}"
        )
        return self._classify_count(
            MetricId.VALIDATED_PAYMENTS, payments.validated, denominator, threshold, url, details
        )

    def _classify_vouchers(
        self, vouchers: Optional[VoucherCounts], threshold: int, url: Optional[str]
    ) -> ValidationOutcome:
        """
        Classifies the share of paid vouchers.

        100% is Ok, above the threshold is a Warning and anything else is an
        Alert. An empty list is an Alert.
        """
        metric = MetricId.PAID_VOUCHERS
        if vouchers is None:
            return _unavailable(metric, url)
        if vouchers.total == 0:
            return _unavailable(metric, url, f"{NOT_AVAILABLE} (no vouchers listed)")

        percentage = vouchers.paid / vouchers.total * 100
        if vouchers.paid == vouchers.total:
            severity = Severity.OK
        elif percentage > threshold:
            severity = Severity.WARNING
        else:
            severity = Severity.ALERT

        message = f"{_count(vouchers.paid)} / {_count(vouchers.total)} ({percentage:.0f}%)"
        if severity == Severity.ALERT:
            message += f" (<= {threshold}%)"
        message += f" · error: {_count(vouchers.error)} · other: {_count(vouchers.other)}"
        return ValidationOutcome(
            metric=metric, severity=severity, message=message, value=vouchers.paid, url=url
        )

    def _classify_pdf(
        self, pdf_count: Optional[int], not_imported: int, threshold: int, url: Optional[str]
    ) -> ValidationOutcome:
        return self._classify_count(MetricId.PDF_COUNT, pdf_count, not_imported, threshold, url)

    def _classify_emails(
        self, emails: Optional[EmailCounts], not_imported: int, threshold: int, url: Optional[str]
    ) -> ValidationOutcome:
        if emails is None:
            return _unavailable(MetricId.EMAIL_COUNT, url)

        details = f" · bulk: {_count(emails.bulk)} · not sent: {_count(emails.not_sent)}"
        return self._classify_count(
            MetricId.EMAIL_COUNT, emails.sent, not_imported, threshold, url, details
        )

    @staticmethod
    def _classify_status(
        metric: MetricId,
        is_ok: Optional[bool],
        ok_message: str,
        down_message: str,
        url: Optional[str],
    ) -> ValidationOutcome:
        if is_ok is None:
            return _unavailable(metric, url)
        if is_ok:
            return ValidationOutcome(
                metric=metric, severity=Severity.OK, message=ok_message, value=True, url=url
            )
        return ValidationOutcome(
            metric=metric, severity=Severity.ALERT, message=down_message, value=False, url=url
        )
