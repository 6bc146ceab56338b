"""
Trend detection against the previous run.

Only count metrics have a direction. Boolean statuses, unavailable values and
metrics without a persisted column always yield Trend.UNKNOWN.
"""

from typing import Optional

from beebot.domain import MetricId, MetricValue, RunRecord, Trend, ValidationOutcome

TREND_GLYPHS = {
    Trend.INCREASING: ":arrow_upper_right:",
    Trend.DECREASING: ":arrow_lower_right:",
    Trend.UNCHANGED: "",
    Trend.UNKNOWN: "",
}


def previous_value(metric: MetricId, record: RunRecord) -> MetricValue:
    """
    Returns the value a metric had in a persisted run.

    Args:
        metric: The metric to look up.
        record: The persisted run.

    Returns:
        MetricValue: The stored value, or None if the metric is not persisted.
    """
    if metric == MetricId.VALIDATED_PAYMENTS:
        return record.payments
    if metric == MetricId.PAID_VOUCHERS:
        return record.vouchers
    if metric == MetricId.PDF_COUNT:
        return record.pdf_count
    if metric == MetricId.EMAIL_COUNT:
        return record.email_count
    if metric == MetricId.PURCHASE_WEBSITE:
        return record.website_ok
    return None


def _is_count(value: MetricValue) -> bool:
    # bool is a subclass of int and must not be compared as a count.
    return isinstance(value, int) and not isinstance(value, bool)


def compare_values(current: MetricValue, previous: MetricValue) -> Trend:
    if not (_is_count(current) and _is_count(previous)):
        return Trend.UNKNOWN
    if current > previous:
        return Trend.INCREASING
    if current < previous:
        return Trend.DECREASING
    return Trend.UNCHANGED


def compare(outcome: ValidationOutcome, previous: Optional[RunRecord]) -> Trend:
    """
    Computes the trend of an outcome.

    Args:
        outcome: The classified metric of the current run.
        previous: The most recent persisted run, or None on a first run or
            when the store is unavailable.

    Returns:
        Trend: The direction of the metric since the previous run.
    """
    if previous is None:
        return Trend.UNKNOWN
    return compare_values(outcome.value, previous_value(outcome.metric, previous))
