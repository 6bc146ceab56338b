"""
Composition of the notification payloads.

This module renders classified and trended outcomes into a Slack message and,
when at least one metric is in Alert, a plain text email. Composition is pure
and performs no I/O, so the payloads can be checked independently of their
delivery.
"""

from datetime import datetime
from typing import Dict, List, Optional, Sequence

from beebot.domain import ChatMessage, EmailMessage, Severity, Trend, ValidationOutcome
from beebot.trend import TREND_GLYPHS

SEVERITY_GLYPHS: Dict[Severity, str] = {
    Severity.OK: ":white_check_mark:",
    Severity.WARNING: ":warning:",
    Severity.ALERT: ":fire:",
}

EMAIL_SEVERITY_GLYPHS: Dict[Severity, str] = {
    Severity.OK: "✅",
    Severity.WARNING: "⚠️",
    Severity.ALERT: "🔥",
}

CHANNEL_MENTION = "<!channel>"
TEST_MODE_BANNER = ":test_tube: *TEST MODE*: canned data, no record persisted"
EMAIL_SUBJECT = "🆘 BEEBOT ALERT !"
TEST_EMAIL_SUBJECT_PREFIX = "[TEST] "


def escape_mrkdwn(text: str) -> str:
    """Escapes the control characters of Slack's mrkdwn format."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def has_alert(outcomes: Sequence[ValidationOutcome]) -> bool:
    return any(outcome.severity == Severity.ALERT for outcome in outcomes)


def _report_title(report_time: datetime) -> str:
    return f"Report Time: {report_time:%H:%M}"


def _format_line(outcome: ValidationOutcome, trend: Trend) -> str:
    name = escape_mrkdwn(outcome.name)
    if outcome.url:
        name = f"<{outcome.url}|{name}>"
    parts = [
        SEVERITY_GLYPHS[outcome.severity],
        TREND_GLYPHS[trend],
        f"*{name}*:",
        escape_mrkdwn(outcome.message),
    ]
    # Unchanged and unknown trends have no glyph.
    return " ".join(part for part in parts if part)


def _section(text: str) -> dict:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def compose_chat_message(
    outcomes: Sequence[ValidationOutcome],
    trends: Sequence[Trend],
    report_time: datetime,
    test_mode: bool = False,
) -> ChatMessage:
    """
    Renders the Slack report of a run.

    Args:
        outcomes: The classified metrics, in display order.
        trends: The trend of each outcome, in the same order.
        report_time: The local time of the run.
        test_mode: Whether to prepend the test mode banner.

    Returns:
        ChatMessage: The message, with one block per metric and a channel
            mention when any metric is in Alert.
    """
    if len(outcomes) != len(trends):
        raise ValueError("Every outcome must have a trend.")

    blocks: List[dict] = []
    lines: List[str] = []

    if test_mode:
        blocks.append(_section(TEST_MODE_BANNER))
        lines.append(TEST_MODE_BANNER)

    title = f"*{_report_title(report_time)}*"
    blocks.append(_section(title))
    lines.append(title)

    for outcome, trend in zip(outcomes, trends):
        line = _format_line(outcome, trend)
        blocks.append(_section(line))
        lines.append(line)

    if has_alert(outcomes):
        blocks.append(_section(CHANNEL_MENTION))
        lines.append(CHANNEL_MENTION)

    return ChatMessage(text="\n".join(lines), blocks=blocks)


def compose_email(
    outcomes: Sequence[ValidationOutcome], report_time: datetime, test_mode: bool = False
) -> Optional[EmailMessage]:
    """
    Renders the alert email of a run.

    Email is reserved for urgent conditions, so nothing is composed unless at
    least one metric is in Alert.

    Args:
        outcomes: The classified metrics, in display order.
        report_time: The local time of the run.
        test_mode: Whether to flag the subject as a test.

    Returns:
        Optional[EmailMessage]: The email, or None when no metric is in Alert.
    """
    if not has_alert(outcomes):
        return None

    lines = [_report_title(report_time), ""]
    for outcome in outcomes:
        message = outcome.message.replace("`", "")
        lines.append(
            f"{EMAIL_SEVERITY_GLYPHS[outcome.severity]} {outcome.severity.value} - {outcome.name}: {message}"
        )

    subject = EMAIL_SUBJECT
    if test_mode:
        subject = TEST_EMAIL_SUBJECT_PREFIX + subject
    return EmailMessage(subject=subject, body="\n".join(lines) + "\n")
