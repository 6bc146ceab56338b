"""
Metric extraction from the monitored pages.

This module turns the raw pages returned by a PageFetcher into a single
MetricSnapshot. Every page has a fixed structure, so each one is scanned with
a fixed set of CSS selectors. Missing pages leave their fields unset and
malformed markup degrades to zero counts; extraction never raises.
"""

import logging
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Set

from bs4 import BeautifulSoup, Tag

from beebot.domain import (
    EmailCounts,
    MetricId,
    MetricSnapshot,
    MetricSource,
    PageContent,
    PaymentCounts,
    SourceKey,
    VoucherCounts,
)

# Module logger
logger = logging.getLogger(__name__)

STATE_SELECTOR = "td.field-state"
PRODUCT_CODE_SELECTOR = "td.field-product_code"
HAS_PDF_SELECTOR = "td.field-has_pdf"
HAS_BEEN_SENT_SELECTOR = "td.field-_has_been_sent"
IMPORTED_FROM_SELECTOR = "td.field-imported_from"
WORKER_STATUS_SELECTOR = "td span.badge"

NOT_IMPORTED = "not imported"
WORKER_ONLINE = "online"
PURCHASE_WEBSITE_TITLE = "Nos bons cadeaux - Le Quatrième Mur"

_PAYMENT_STATES = {
    "validated": "validated",
    "to validate": "to_validate",
    "3-d secure": "threed_secure",
    "cancelled": "cancelled",
    "error": "error",
}

# Which metrics each page feeds, for deep links in notifications.
_SOURCE_METRICS = {
    SourceKey.PAYMENTS: (MetricId.VALIDATED_PAYMENTS,),
    SourceKey.PAID_VOUCHERS: (MetricId.PAID_VOUCHERS,),
    SourceKey.VOUCHERS: (MetricId.PDF_COUNT, MetricId.EMAIL_COUNT),
    SourceKey.PURCHASE_WEBSITE: (MetricId.PURCHASE_WEBSITE,),
    SourceKey.CELERY: (MetricId.WORKER_QUEUE,),
}


def _parse(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _text(cell: Optional[Tag]) -> str:
    if cell is None:
        return ""
    return cell.get_text(strip=True)


def _is_truthy(cell: Tag) -> bool:
    """
    Reads a boolean admin column.

    Django renders booleans either as a 'Yes'/'True' text or as an icon whose
    alt attribute is 'True'.
    """
    if _text(cell).lower() in ("yes", "true"):
        return True
    icon = cell.find("img")
    return icon is not None and str(icon.get("alt", "")).lower() == "true"


def count_payments(html: str) -> PaymentCounts:
    """
    Counts payments by state.

    A row whose product code was already seen on an earlier row is counted as
    grouped instead of under its own state. This relies on rows being listed
    in a stable order within the page.

    Args:
        html: The payments change list page.

    Returns:
        PaymentCounts: The breakdown of the listed payments.
    """
    counts: Dict[str, int] = dict.fromkeys(PaymentCounts._fields, 0)
    seen_codes: Set[str] = set()

    for row in _parse(html).find_all("tr"):
        state_cell = row.select_one(STATE_SELECTOR)
        if state_cell is None:
            continue

        code = _text(row.select_one(PRODUCT_CODE_SELECTOR))
        if code and code in seen_codes:
            counts["group"] += 1
            continue
        if code:
            seen_codes.add(code)

        field = _PAYMENT_STATES.get(_text(state_cell).lower())
        if field is not None:
            counts[field] += 1

    return PaymentCounts(**counts)


def count_paid_vouchers(html: str) -> VoucherCounts:
    paid = error = other = 0
    for cell in _parse(html).select(STATE_SELECTOR):
        state = _text(cell).lower()
        if state == "paid":
            paid += 1
        elif state == "error":
            error += 1
        else:
            other += 1
    return VoucherCounts(paid=paid, error=error, other=other)


def count_pdf(html: str) -> int:
    return sum(1 for cell in _parse(html).select(HAS_PDF_SELECTOR) if _is_truthy(cell))


def count_emails(html: str) -> EmailCounts:
    sent = not_sent = bulk = 0
    for cell in _parse(html).select(HAS_BEEN_SENT_SELECTOR):
        if _text(cell).lower() == "bulk":
            bulk += 1
        elif _is_truthy(cell):
            sent += 1
        else:
            not_sent += 1
    return EmailCounts(sent=sent, not_sent=not_sent, bulk=bulk)


def count_not_imported(html: str) -> int:
    return sum(
        1 for cell in _parse(html).select(IMPORTED_FROM_SELECTOR) if _text(cell).lower() == NOT_IMPORTED
    )


def are_workers_online(html: str) -> bool:
    """
    Checks the worker status badges of the queue dashboard.

    Returns:
        bool: True if at least one badge is present and every badge reads
            'Online', False otherwise.
    """
    badges = _parse(html).select(WORKER_STATUS_SELECTOR)
    return bool(badges) and all(_text(badge).lower() == WORKER_ONLINE for badge in badges)


def has_correct_content(html: str) -> bool:
    return any(_text(title) == PURCHASE_WEBSITE_TITLE for title in _parse(html).find_all("h1"))


def extract_snapshot(
    pages: Mapping[SourceKey, PageContent], sources: Iterable[MetricSource] = ()
) -> MetricSnapshot:
    """
    Builds the snapshot of a run from the fetched pages.

    Args:
        pages: The pages returned by the fetcher, keyed by source.
        sources: The configured sources, used to link metrics whose page
            could not be fetched.

    Returns:
        MetricSnapshot: The extracted values. Fields of missing pages stay at
            their defaults.
    """
    values: Dict[str, object] = {}
    source_urls: Dict[MetricId, str] = {}

    for source in sources:
        for metric in _SOURCE_METRICS.get(source.key, ()):
            source_urls[metric] = source.url
    for key, page in pages.items():
        for metric in _SOURCE_METRICS.get(key, ()):
            source_urls[metric] = page.url

    if SourceKey.PAYMENTS in pages:
        values["payments"] = count_payments(pages[SourceKey.PAYMENTS].body)

    if SourceKey.PAID_VOUCHERS in pages:
        values["vouchers"] = count_paid_vouchers(pages[SourceKey.PAID_VOUCHERS].body)

    if SourceKey.VOUCHERS in pages:
        html = pages[SourceKey.VOUCHERS].body
        values["pdf_count"] = count_pdf(html)
        values["emails"] = count_emails(html)
        values["not_imported_count"] = count_not_imported(html)

    if SourceKey.PURCHASE_WEBSITE in pages:
        values["is_purchase_website_ok"] = has_correct_content(pages[SourceKey.PURCHASE_WEBSITE].body)

    if SourceKey.CELERY in pages:
        values["is_worker_queue_online"] = are_workers_online(pages[SourceKey.CELERY].body)

    snapshot = MetricSnapshot(source_urls=MappingProxyType(source_urls), **values)
    logger.debug(f"Extracted snapshot: {snapshot}")
    return snapshot
