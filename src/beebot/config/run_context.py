"""
Configuration context for the Beebot monitoring system.

This module defines a data structure that holds all configuration parameters
of a run. It is built once at process start and passed explicitly to the
entry point; no module keeps configuration state.
"""

from typing import NamedTuple, Tuple


class RunContext(NamedTuple):
    """
    A data structure containing all configuration parameters for a run.

    This class is immutable. It is created by parsing command-line arguments
    and environment variables.

    Attributes:
        dsn: Database connection string for PostgreSQL.
        run_id: Identifier of this run, added to every log record.
        logging_type: Type of logging configuration to use (dev, prod, or custom).
        logging_config_file: Path to custom logging configuration file (if logging_type is 'custom').
        max_timeout: Maximum timeout duration in seconds for HTTP requests.
        db_pool_size: Maximum number of connections in the database connection pool.
        test_mode: Whether to run against canned pages without side effects.
        api_token: Token of the admin API, sent as a bearer credential.
        celery_username: Basic authentication user of the worker queue dashboard.
        celery_password: Basic authentication password of the worker queue dashboard.
        slack_token: Slack bot token.
        slack_channel: Slack channel receiving the reports.
        sendgrid_token: SendGrid API key.
        mail_sender: Sender address of alert emails.
        mail_recipients: Recipient addresses of alert emails.
        url_payments: URL of the payments list.
        url_vouchers: URL of the vouchers list (PDF and email columns).
        url_paid_vouchers: URL of the paid vouchers list.
        url_purchase_website: URL of the public purchase website.
        url_celery: URL of the worker queue dashboard.
        day_threshold: Warning threshold in percent during the day window.
        night_threshold: Warning threshold in percent outside the day window.
        day_start_hour: First hour of the day window.
        day_end_hour: Hour at which the day window ends.
    """

    dsn: str
    run_id: str
    logging_type: str
    logging_config_file: str
    max_timeout: int
    db_pool_size: int
    test_mode: bool
    api_token: str
    celery_username: str
    celery_password: str
    slack_token: str
    slack_channel: str
    sendgrid_token: str
    mail_sender: str
    mail_recipients: Tuple[str, ...]
    url_payments: str
    url_vouchers: str
    url_paid_vouchers: str
    url_purchase_website: str
    url_celery: str
    day_threshold: int
    night_threshold: int
    day_start_hour: int
    day_end_hour: int
