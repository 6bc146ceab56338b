"""
Configuration module for the Beebot monitoring system.

This module provides functionality to parse command-line arguments and environment
variables to create a configuration context for a run. Credentials and source
URLs are only read from the environment; tunable settings can be overridden on
the command line.
"""

import argparse
import os
from typing import Any, List, Optional, Tuple
from uuid import uuid4

from beebot.config.constants import (
    DEFAULT_DAY_END_HOUR,
    DEFAULT_DAY_START_HOUR,
    DEFAULT_DAY_THRESHOLD,
    DEFAULT_DB_POOL_SIZE,
    DEFAULT_DSN,
    DEFAULT_LOGGING_CONFIG_FILE,
    DEFAULT_LOGGING_TYPE,
    DEFAULT_MAX_TIMEOUT,
    DEFAULT_NIGHT_THRESHOLD,
    DEFAULT_RUN_ID_PREFIX,
    DEFAULT_TEST_MODE,
    RECIPIENT_ENV_VARS,
)
from beebot.config.run_context import RunContext
from beebot.domain import AuthMode, MetricSource, SourceKey, ThresholdPolicy
from beebot.errors import ConfigurationError


def _read_recipients() -> Tuple[str, ...]:
    """
    Reads the alert recipients from the environment.

    SENDGRID_RECIPIENTS holds a comma-separated list. When it is absent, the
    individual SENDGRID_RECIPIENT_<n> variables are used.
    """
    recipients = os.getenv("SENDGRID_RECIPIENTS")
    if recipients:
        candidates = recipients.split(",")
    else:
        candidates = [os.getenv(name) or "" for name in RECIPIENT_ENV_VARS]
    return tuple(address.strip() for address in candidates if address and address.strip())


def get_context(argv: Optional[List[str]] = None) -> RunContext:
    """
    Parse command-line arguments and environment variables to create a configuration context.

    For each tunable option, it first checks for a command-line argument, then
    falls back to an environment variable, and finally uses a default value.

    Args:
        argv: The arguments to parse. Defaults to sys.argv.

    Returns:
        RunContext: A configuration context object containing all parsed settings.
    """
    parser = argparse.ArgumentParser(
        description="Scrapes the admin dashboards, validates their metrics and reports them."
    )

    parser.add_argument(
        "-t",
        "--test",
        action="store_true",
        default=(os.getenv("BEEBOT_TEST_MODE") or DEFAULT_TEST_MODE).lower() == "true",
        help="Runs the pipeline against canned pages, without persistence or live notifications.\n"
        "If not provided, the value is read from the BEEBOT_TEST_MODE environment variable.",
    )

    parser.add_argument(
        "-dsn",
        type=str,
        default=os.getenv("DATABASE_URL", DEFAULT_DSN),
        help="Specifies the DSN (connection string) for the PostgreSQL database.\n"
        "If not provided, the value is read from the DATABASE_URL environment variable.\n"
        f"If that is also absent, a default value for a local database is used: {DEFAULT_DSN}",
    )

    parser.add_argument(
        "-rid",
        "--run-id",
        type=str,
        default=os.getenv("BEEBOT_RUN_ID", f"{DEFAULT_RUN_ID_PREFIX}{uuid4()}"),
        help="Specifies the identifier added to every log record of the run.\n"
        "If not provided, the value is read from the BEEBOT_RUN_ID environment variable.\n"
        f"If that is also absent, the default value will be {DEFAULT_RUN_ID_PREFIX}uuid4().",
    )

    parser.add_argument(
        "-ps",
        "--db-pool-size",
        type=int,
        default=int(os.getenv("BEEBOT_DB_POOL_SIZE", DEFAULT_DB_POOL_SIZE)),
        help="Specifies the maximum number of connections in the database connection pool.\n"
        f"Defaults to BEEBOT_DB_POOL_SIZE, then to {DEFAULT_DB_POOL_SIZE}.",
    )

    parser.add_argument(
        "-mt",
        "--max-timeout",
        type=int,
        default=int(os.getenv("BEEBOT_MAX_TIMEOUT", DEFAULT_MAX_TIMEOUT)),
        help="Specifies the maximum timeout duration in seconds for HTTP requests.\n"
        f"Defaults to BEEBOT_MAX_TIMEOUT, then to {DEFAULT_MAX_TIMEOUT} seconds.",
    )

    parser.add_argument(
        "-lt",
        "--logging-type",
        type=str,
        default=os.getenv("BEEBOT_LOGGING_TYPE", DEFAULT_LOGGING_TYPE),
        help="Specifies the logging configuration type to use.\n"
        "Allowed values: dev, prod, custom (case insensitive).\n"
        "For 'dev' and 'prod', system will use built-in configurations.\n"
        "For 'custom', the --logging-config-file argument is required.",
    )

    parser.add_argument(
        "-lcf",
        "--logging-config-file",
        type=str,
        default=os.getenv("BEEBOT_LOGGING_CONFIG_FILE", DEFAULT_LOGGING_CONFIG_FILE),
        help="Path to custom logging configuration file.\n"
        "Required when --logging-type is set to 'custom'.",
    )

    parser.add_argument(
        "-dt",
        "--day-threshold",
        type=int,
        default=int(os.getenv("BEEBOT_DAY_THRESHOLD", DEFAULT_DAY_THRESHOLD)),
        help="Warning threshold, in percent of the expected total, during the day.\n"
        f"Defaults to BEEBOT_DAY_THRESHOLD, then to {DEFAULT_DAY_THRESHOLD}.",
    )

    parser.add_argument(
        "-nt",
        "--night-threshold",
        type=int,
        default=int(os.getenv("BEEBOT_NIGHT_THRESHOLD", DEFAULT_NIGHT_THRESHOLD)),
        help="Warning threshold, in percent of the expected total, during the night.\n"
        f"Defaults to BEEBOT_NIGHT_THRESHOLD, then to {DEFAULT_NIGHT_THRESHOLD}.",
    )

    parser.add_argument(
        "--day-start-hour",
        type=int,
        default=int(os.getenv("BEEBOT_DAY_START_HOUR", DEFAULT_DAY_START_HOUR)),
        help=f"First hour of the day window. Defaults to {DEFAULT_DAY_START_HOUR}.",
    )

    parser.add_argument(
        "--day-end-hour",
        type=int,
        default=int(os.getenv("BEEBOT_DAY_END_HOUR", DEFAULT_DAY_END_HOUR)),
        help=f"Hour at which the day window ends. Defaults to {DEFAULT_DAY_END_HOUR}.",
    )

    # Parse the command-line arguments
    args: Any = parser.parse_args(argv)

    # Create and return a RunContext with the parsed settings
    return RunContext(
        dsn=args.dsn,
        run_id=args.run_id,
        logging_type=args.logging_type,
        logging_config_file=args.logging_config_file,
        max_timeout=args.max_timeout,
        db_pool_size=args.db_pool_size,
        test_mode=args.test,
        api_token=os.getenv("API_TOKEN", ""),
        celery_username=os.getenv("CELERY_USERNAME", ""),
        celery_password=os.getenv("CELERY_PASSWORD", ""),
        slack_token=os.getenv("SLACK_API_TOKEN", ""),
        slack_channel=os.getenv("SLACK_CHANNEL", ""),
        sendgrid_token=os.getenv("SENDGRID_API_TOKEN", ""),
        mail_sender=os.getenv("SENDGRID_SENDER", ""),
        mail_recipients=_read_recipients(),
        url_payments=os.getenv("URL_PAYMENTS", ""),
        url_vouchers=os.getenv("URL_VOUCHERS", ""),
        url_paid_vouchers=os.getenv("URL_PAID_VOUCHERS", ""),
        url_purchase_website=os.getenv("URL_PURCHASE_WEBSITE", ""),
        url_celery=os.getenv("URL_CELERY", ""),
        day_threshold=args.day_threshold,
        night_threshold=args.night_threshold,
        day_start_hour=args.day_start_hour,
        day_end_hour=args.day_end_hour,
    )


# Settings a live run cannot do without, with the variable that provides them.
_REQUIRED_LIVE_SETTINGS = {
    "api_token": "API_TOKEN",
    "celery_username": "CELERY_USERNAME",
    "celery_password": "CELERY_PASSWORD",
    "slack_token": "SLACK_API_TOKEN",
    "slack_channel": "SLACK_CHANNEL",
    "sendgrid_token": "SENDGRID_API_TOKEN",
    "mail_sender": "SENDGRID_SENDER",
    "mail_recipients": "SENDGRID_RECIPIENTS",
    "url_payments": "URL_PAYMENTS",
    "url_vouchers": "URL_VOUCHERS",
    "url_paid_vouchers": "URL_PAID_VOUCHERS",
    "url_purchase_website": "URL_PURCHASE_WEBSITE",
    "url_celery": "URL_CELERY",
}


def validate_context(context: RunContext) -> None:
    """
    Checks that the context holds everything a run needs.

    Test runs use canned pages and dry-run notifiers, so they need no
    credential.

    Args:
        context: The context to check.

    Raises:
        ConfigurationError: If a required setting is missing or a value is out of range.
    """
    for hour in (context.day_start_hour, context.day_end_hour):
        if not 0 <= hour <= 24:
            raise ConfigurationError(f"Invalid hour in day window: {hour}")

    if context.test_mode:
        return

    missing = [
        variable
        for field, variable in _REQUIRED_LIVE_SETTINGS.items()
        if not getattr(context, field)
    ]
    if missing:
        raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")


def get_sources(context: RunContext) -> List[MetricSource]:
    """
    Builds the list of monitored sources.

    Args:
        context: The run configuration.

    Returns:
        List[MetricSource]: The sources, each with the authentication it requires.
    """
    return [
        MetricSource(SourceKey.PAYMENTS, context.url_payments, AuthMode.BEARER),
        MetricSource(SourceKey.VOUCHERS, context.url_vouchers, AuthMode.BEARER),
        MetricSource(SourceKey.PAID_VOUCHERS, context.url_paid_vouchers, AuthMode.BEARER),
        MetricSource(SourceKey.PURCHASE_WEBSITE, context.url_purchase_website, AuthMode.NONE),
        MetricSource(SourceKey.CELERY, context.url_celery, AuthMode.BASIC),
    ]


def get_policy(context: RunContext) -> ThresholdPolicy:
    return ThresholdPolicy(
        day_threshold=context.day_threshold,
        night_threshold=context.night_threshold,
        day_start_hour=context.day_start_hour,
        day_end_hour=context.day_end_hour,
    )
