"""
Domain models for the Beebot monitoring pipeline.

This module defines the core data structures that flow through a run:
monitored sources, fetched pages, the extracted metric snapshot, classified
outcomes, trends and the persisted run record. These models are immutable
and carry no behavior beyond small derived properties.
"""

from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, NamedTuple, Optional, Union


class AuthMode(str, Enum):
    """
    Defines how a source authenticates its requests.

    Inheriting from 'str' allows enum members to be read directly from
    configuration values.
    """

    BEARER = "bearer"
    BASIC = "basic"
    NONE = "none"


class SourceKey(str, Enum):
    """Stable identifiers of the monitored pages."""

    PAYMENTS = "payments"
    VOUCHERS = "vouchers"
    PAID_VOUCHERS = "paid_vouchers"
    PURCHASE_WEBSITE = "purchase_website"
    CELERY = "celery"


class MetricId(str, Enum):
    """
    Typed identifier of every metric produced by a run.

    The value is a stable machine name; the display name is exposed through
    the 'label' property and is what users see in notifications.
    """

    VALIDATED_PAYMENTS = "validated_payments"
    PAID_VOUCHERS = "paid_vouchers"
    PDF_COUNT = "pdf_count"
    EMAIL_COUNT = "email_count"
    PURCHASE_WEBSITE = "purchase_website"
    WORKER_QUEUE = "worker_queue"

    @property
    def label(self) -> str:
        return _METRIC_LABELS[self]


_METRIC_LABELS: Dict[MetricId, str] = {
    MetricId.VALIDATED_PAYMENTS: "Validated payments",
    MetricId.PAID_VOUCHERS: "Paid vouchers",
    MetricId.PDF_COUNT: "PDF count",
    MetricId.EMAIL_COUNT: "Email check count",
    MetricId.PURCHASE_WEBSITE: "Purchase website",
    MetricId.WORKER_QUEUE: "Worker queue",
}


class Severity(str, Enum):
    """Classification levels, from least to most severe."""

    OK = "Ok"
    WARNING = "Warning"
    ALERT = "Alert"


class Trend(str, Enum):
    """Direction of a metric compared to the previous run."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    UNCHANGED = "unchanged"
    UNKNOWN = "unknown"


class MetricSource(NamedTuple):
    """
    A single monitored page and the way to authenticate against it.

    Attributes:
        key: The stable identifier of the source.
        url: The URL to fetch.
        auth_mode: The authentication scheme required by the source.
    """

    key: SourceKey
    url: str
    auth_mode: AuthMode


class PageContent(NamedTuple):
    """The raw body of a fetched page together with its URL."""

    url: str
    body: str


class PaymentCounts(NamedTuple):
    """
    Breakdown of the payments list by state.

    Attributes:
        validated: Payments in the 'Validated' state.
        to_validate: Payments waiting for validation.
        threed_secure: Payments stuck in the 3-D Secure step.
        cancelled: Cancelled payments.
        error: Payments in error.
        group: Rows sharing a product code with an earlier row.
    """

    validated: int = 0
    to_validate: int = 0
    threed_secure: int = 0
    cancelled: int = 0
    error: int = 0
    group: int = 0


class VoucherCounts(NamedTuple):
    """Breakdown of the paid vouchers list by state."""

    paid: int = 0
    error: int = 0
    other: int = 0

    @property
    def total(self) -> int:
        return self.paid + self.error + self.other


class EmailCounts(NamedTuple):
    """Breakdown of voucher notification emails."""

    sent: int = 0
    not_sent: int = 0
    bulk: int = 0


class MetricSnapshot(NamedTuple):
    """
    The complete set of values extracted during one run.

    A field set to None means the corresponding page was not fetched, which
    is distinct from a fetched page that yielded a zero count.

    Attributes:
        payments: Payment breakdown, or None if the payments page is missing.
        vouchers: Paid voucher breakdown, or None if the page is missing.
        pdf_count: Vouchers with a generated PDF, or None if the page is missing.
        emails: Notification email breakdown, or None if the page is missing.
        not_imported_count: Vouchers created through the shop rather than
            imported. Used as the expected total for PDF and email metrics.
        is_purchase_website_ok: Whether the public purchase website is up.
        is_worker_queue_online: Whether every queue worker reports online, or
            None if the dashboard is missing.
        source_urls: The URL of the page each metric was read from.
    """

    payments: Optional[PaymentCounts] = None
    vouchers: Optional[VoucherCounts] = None
    pdf_count: Optional[int] = None
    emails: Optional[EmailCounts] = None
    not_imported_count: int = 0
    is_purchase_website_ok: bool = False
    is_worker_queue_online: Optional[bool] = None
    source_urls: Mapping[MetricId, str] = MappingProxyType({})


# A comparable value is a count, a boolean status or None when unavailable.
MetricValue = Union[int, bool, None]


class ValidationOutcome(NamedTuple):
    """
    The classified result of a single metric.

    Attributes:
        metric: The metric this outcome refers to.
        severity: The classification level.
        message: Human readable details, formatted for chat.
        value: The comparable value used for trend detection.
        url: The page the value was read from, for deep linking.
    """

    metric: MetricId
    severity: Severity
    message: str
    value: MetricValue
    url: Optional[str] = None

    @property
    def name(self) -> str:
        return self.metric.label


class RunRecord(NamedTuple):
    """
    The persisted summary of a run.

    This structure corresponds to the columns of the 'activity_logs' table.
    Records are only ever inserted.
    """

    id: Optional[int]
    payments: int
    vouchers: int
    pdf_count: int
    email_count: int
    website_ok: bool
    slack_sent: bool
    email_sent: bool
    created_at: Optional[datetime] = None


class ThresholdPolicy(NamedTuple):
    """
    Thresholds applied by the classifier.

    Attributes:
        day_threshold: Warning threshold, in percent, during the day window.
        night_threshold: Warning threshold, in percent, outside the day window.
        day_start_hour: First hour (inclusive) of the day window.
        day_end_hour: Last hour (exclusive) of the day window.
        ok_ratio: Percentage of the expected total required for an Ok status.
        payments_page_size: Number of rows listed on the payments page.
    """

    day_threshold: int = 75
    night_threshold: int = 50
    day_start_hour: int = 8
    day_end_hour: int = 20
    ok_ratio: int = 85
    payments_page_size: int = 100

    def active_threshold(self, hour: int) -> int:
        if self.day_start_hour <= hour < self.day_end_hour:
            return self.day_threshold
        return self.night_threshold


class ChatMessage(NamedTuple):
    """A Slack message made of a plain text fallback and layout blocks."""

    text: str
    blocks: List[dict]


class EmailMessage(NamedTuple):
    """A plain text alert email."""

    subject: str
    body: str


class RunReport(NamedTuple):
    """
    Everything a run produced, returned by the pipeline.

    Attributes:
        outcomes: The classified metrics, in display order.
        trends: The trend of each outcome, in the same order.
        chat_sent: Whether the chat message was delivered.
        email_sent: Whether the alert email was delivered.
        record: The record handed to the run store.
        saved: Whether the run store accepted the record.
    """

    outcomes: List[ValidationOutcome]
    trends: List[Trend]
    chat_sent: bool
    email_sent: bool
    record: RunRecord
    saved: bool
