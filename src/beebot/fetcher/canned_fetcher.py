"""
Canned fetcher used in test mode.

This module provides a PageFetcher that never touches the network. It serves
fixed "golden" pages shaped like the real admin dashboards, so that a test
run exercises extraction, classification and composition end-to-end with a
known result.
"""

import logging
from typing import Dict, Iterable, List, Optional

from beebot.contracts import PageFetcher
from beebot.domain import MetricSource, PageContent, SourceKey

# Module logger
logger = logging.getLogger(__name__)


def _change_list(rows: List[str]) -> str:
    """Wraps table rows in a Django admin change list page."""
    return (
        "<html><body><div id='changelist'>"
        "<table id='result_list'><tbody>"
        + "".join(rows)
        + "</tbody></table></div></body></html>"
    )


def _payments_page() -> str:
    rows: List[str] = []
    states = (
        ["Validated"] * 80 + ["To validate"] * 5 + ["3-D Secure"] * 2 + ["Cancelled"] + ["Error"] * 2
    )
    for index, state in enumerate(states):
        rows.append(
            f"<tr><td class='field-product_code'>BC-{index:04d}</td>"
            f"<td class='field-state'>{state}</td></tr>"
        )
    # Ten payments for gift cards already listed above.
    for index in range(10):
        rows.append(
            f"<tr><td class='field-product_code'>BC-{index:04d}</td>"
            f"<td class='field-state'>Validated</td></tr>"
        )
    return _change_list(rows)


def _paid_vouchers_page() -> str:
    states = ["Paid"] * 38 + ["Error"] * 2
    return _change_list([f"<tr><td class='field-state'>{state}</td></tr>" for state in states])


def _vouchers_page() -> str:
    rows: List[str] = []
    for index in range(50):
        imported_from = "Not imported" if index < 40 else "Ticketing"
        has_pdf = "True" if index < 40 else "False"
        if index < 30:
            sent = "Yes"
        elif index < 35:
            sent = "Bulk"
        else:
            sent = "No"
        rows.append(
            "<tr>"
            f"<td class='field-imported_from'>{imported_from}</td>"
            f"<td class='field-has_pdf'><img src='/static/admin/img/icon-yes.svg' alt='{has_pdf}'></td>"
            f"<td class='field-_has_been_sent'>{sent}</td>"
            "</tr>"
        )
    return _change_list(rows)


def _purchase_website_page() -> str:
    return "<html><body><h1>Nos bons cadeaux - Le Quatrième Mur</h1></body></html>"


def _celery_page() -> str:
    rows = [
        f"<tr><td>celery@worker-{index}</td>"
        f"<td><span class='badge bg-success'>Online</span></td></tr>"
        for index in range(2)
    ]
    return f"<html><body><table id='workers-table'><tbody>{''.join(rows)}</tbody></table></body></html>"


GOLDEN_PAGES: Dict[SourceKey, str] = {
    SourceKey.PAYMENTS: _payments_page(),
    SourceKey.PAID_VOUCHERS: _paid_vouchers_page(),
    SourceKey.VOUCHERS: _vouchers_page(),
    SourceKey.PURCHASE_WEBSITE: _purchase_website_page(),
    SourceKey.CELERY: _celery_page(),
}


class CannedFetcher(PageFetcher):
    """
    A PageFetcher returning fixed pages instead of performing requests.

    Sources listed in 'missing' are left out of the result, which simulates
    unavailable pages.
    """

    def __init__(
        self,
        pages: Optional[Dict[SourceKey, str]] = None,
        missing: Iterable[SourceKey] = (),
    ) -> None:
        self._pages: Dict[SourceKey, str] = dict(GOLDEN_PAGES if pages is None else pages)
        self._missing = frozenset(missing)

    async def fetch_all(self, sources: Iterable[MetricSource]) -> Dict[SourceKey, PageContent]:
        results: Dict[SourceKey, PageContent] = {}
        for source in sources:
            body = self._pages.get(source.key)
            if body is None or source.key in self._missing:
                logger.warning(f"No canned page for source {source.key.value}")
                continue
            results[source.key] = PageContent(url=source.url, body=body)

        logger.info(f"Serving {len(results)} canned pages.")
        return results
