"""
Unit tests for the message composition module.
"""

from datetime import datetime
from typing import List

import pytest

from beebot.composer import (
    CHANNEL_MENTION,
    EMAIL_SUBJECT,
    TEST_MODE_BANNER,
    compose_chat_message,
    compose_email,
    escape_mrkdwn,
)
from beebot.domain import MetricId, Severity, Trend, ValidationOutcome

REPORT_TIME = datetime(2026, 10, 19, 9, 5)


@pytest.fixture
def healthy_outcomes() -> List[ValidationOutcome]:
    return [
        ValidationOutcome(
            metric=MetricId.VALIDATED_PAYMENTS,
            severity=Severity.OK,
            message="`90` / `90`",
            value=90,
            url="https://admin/payments/",
        ),
        ValidationOutcome(
            metric=MetricId.PDF_COUNT,
            severity=Severity.WARNING,
            message="`80` / `100` (< `85`)",
            value=80,
            url=None,
        ),
    ]


@pytest.fixture
def alert_outcomes(healthy_outcomes: List[ValidationOutcome]) -> List[ValidationOutcome]:
    return healthy_outcomes + [
        ValidationOutcome(
            metric=MetricId.PURCHASE_WEBSITE,
            severity=Severity.ALERT,
            message="is DOWN",
            value=False,
            url="https://shop/",
        )
    ]


def test_escape_mrkdwn_should_escape_control_characters() -> None:
    assert escape_mrkdwn("a < b & c > d") == "a &lt; b &amp; c &gt; d"


def test_compose_chat_message_should_render_one_block_per_metric(
    healthy_outcomes: List[ValidationOutcome],
) -> None:
    """
    Tests the blocks of a report without alert.
    """
    # Act
    message = compose_chat_message(
        healthy_outcomes, [Trend.INCREASING, Trend.UNKNOWN], REPORT_TIME
    )

    # Assert
    texts = [block["text"]["text"] for block in message.blocks]
    assert texts == [
        "*Report Time: 09:05*",
        ":white_check_mark: :arrow_upper_right: *<https://admin/payments/|Validated payments>*: `90` / `90`",
        ":warning: *PDF count*: `80` / `100` (&lt; `85`)",
    ]
    assert CHANNEL_MENTION not in message.text
    assert message.text == "\n".join(texts)


def test_compose_chat_message_should_mention_the_channel_on_alert(
    alert_outcomes: List[ValidationOutcome],
) -> None:
    """
    Tests that any Alert appends a channel wide mention.
    """
    # Act
    message = compose_chat_message(
        alert_outcomes, [Trend.UNCHANGED, Trend.DECREASING, Trend.UNKNOWN], REPORT_TIME
    )

    # Assert
    assert message.blocks[-1]["text"]["text"] == CHANNEL_MENTION
    assert ":fire: *<https://shop/|Purchase website>*: is DOWN" in message.text
    assert ":arrow_lower_right:" in message.text


def test_compose_chat_message_should_prepend_the_test_banner(
    healthy_outcomes: List[ValidationOutcome],
) -> None:
    """
    Tests that test runs are clearly flagged.
    """
    # Act
    message = compose_chat_message(
        healthy_outcomes, [Trend.UNKNOWN, Trend.UNKNOWN], REPORT_TIME, test_mode=True
    )

    # Assert
    assert message.blocks[0]["text"]["text"] == TEST_MODE_BANNER
    assert message.text.startswith(TEST_MODE_BANNER)


def test_compose_chat_message_should_reject_missing_trends(
    healthy_outcomes: List[ValidationOutcome],
) -> None:
    with pytest.raises(ValueError):
        compose_chat_message(healthy_outcomes, [Trend.UNKNOWN], REPORT_TIME)


def test_compose_email_should_return_none_without_alert(
    healthy_outcomes: List[ValidationOutcome],
) -> None:
    """
    Tests that routine reports never produce an email.
    """
    assert compose_email(healthy_outcomes, REPORT_TIME) is None


def test_compose_email_should_list_every_metric_on_alert(
    alert_outcomes: List[ValidationOutcome],
) -> None:
    """
    Tests the plain text body of an alert email.
    """
    # Act
    email = compose_email(alert_outcomes, REPORT_TIME)

    # Assert
    assert email is not None
    assert email.subject == EMAIL_SUBJECT
    assert email.body == (
        "Report Time: 09:05\n"
        "\n"
        "✅ Ok - Validated payments: 90 / 90\n"
        "⚠️ Warning - PDF count: 80 / 100 (< 85)\n"
        "🔥 Alert - Purchase website: is DOWN\n"
    )


def test_compose_email_should_flag_test_runs(alert_outcomes: List[ValidationOutcome]) -> None:
    email = compose_email(alert_outcomes, REPORT_TIME, test_mode=True)

    assert email is not None
    assert email.subject == "[TEST] " + EMAIL_SUBJECT
