"""
Shared fixtures for the Beebot test suite.
"""

from typing import Any, Callable

import pytest

from beebot.config.run_context import RunContext


def make_context(**overrides: Any) -> RunContext:
    """
    Creates a RunContext with test values.

    Args:
        overrides: Fields to replace.

    Returns:
        RunContext: A complete live-mode context.
    """
    values = dict(
        dsn="postgresql://localhost/test",
        run_id="test-run",
        logging_type="dev",
        logging_config_file="",
        max_timeout=10,
        db_pool_size=2,
        test_mode=False,
        api_token="api-token",
        celery_username="flower",
        celery_password="secret",
        slack_token="xoxb-token",
        slack_channel="C0123",
        sendgrid_token="SG.token",
        mail_sender="beebot@example.com",
        mail_recipients=("ops@example.com", "dev@example.com"),
        url_payments="https://admin.example.com/payments/",
        url_vouchers="https://admin.example.com/vouchers/",
        url_paid_vouchers="https://admin.example.com/vouchers/?state=paid",
        url_purchase_website="https://shop.example.com/",
        url_celery="https://flower.example.com/",
        day_threshold=75,
        night_threshold=50,
        day_start_hour=8,
        day_end_hour=20,
    )
    values.update(overrides)
    return RunContext(**values)


@pytest.fixture
def context_factory() -> Callable[..., RunContext]:
    return make_context


@pytest.fixture
def context() -> RunContext:
    return make_context()
