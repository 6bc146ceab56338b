"""
Logging setup for a Beebot run.

The configuration is a dictConfig JSON file: one of the two bundled with the
package ('dev', 'prod') or a file given on the command line ('custom'). Every
record is stamped with the run ID so the lines of one run can be grouped.
"""

import json
import logging.config
import os
from typing import Any, Dict

from beebot.config import RunContext

_BUNDLED_CONFIGS = {
    "dev": "logging-config-dev.json",
    "prod": "logging-config-prod.json",
}


def configure_logging(context: RunContext) -> None:
    """
    Applies the logging configuration selected by the run context.

    Args:
        context: The run configuration. Its 'logging_type' is one of dev, prod
            or custom (case insensitive); 'custom' reads 'logging_config_file'.

    Raises:
        ValueError: If the logging type is missing or unknown, or if 'custom'
            is selected without a file.
        RuntimeError: If the configuration file cannot be loaded.
    """
    logging_type: str = context.logging_type.lower()
    if not logging_type:
        raise ValueError("Logging type must be provided.")

    if logging_type in _BUNDLED_CONFIGS:
        _load_logging_config(_get_local_package_file_path(_BUNDLED_CONFIGS[logging_type]))
    elif logging_type == "custom":
        if not context.logging_config_file:
            raise ValueError("Custom logging configuration file must be provided.")
        _load_logging_config(context.logging_config_file)
    else:
        raise ValueError(
            f"Invalid logging type: {context.logging_type}. Allowed values are: dev, prod, custom"
        )

    # Filters on a logger do not apply to records propagated from its children,
    # so the run ID filter goes on the handlers.
    run_filter = _RunIdFilter(run_id=context.run_id)
    for handler in logging.getLogger().handlers:
        handler.addFilter(run_filter)

    logging.debug(f"Logging configured for run {context.run_id}.")


def _load_logging_config(config_file: str) -> None:
    """Reads a JSON dictConfig file and applies it, wrapping any failure in RuntimeError."""
    try:
        with open(config_file) as f:
            config: Dict[str, Any] = json.load(f)
            logging.config.dictConfig(config)
    except FileNotFoundError as err:
        raise RuntimeError(f"Logging config file not found: {config_file}") from err
    except json.JSONDecodeError as err:
        raise RuntimeError(f"Invalid JSON format in logging config file: {config_file}") from err
    except Exception as err:
        raise RuntimeError(f"Error loading logging config: {str(err)}") from err


def _get_local_package_file_path(config_file: str) -> str:
    return os.path.join(os.path.dirname(__file__), config_file)


class _RunIdFilter(logging.Filter):
    """Sets 'run_id' on every record it sees, for use in format strings."""

    def __init__(self, run_id: str) -> None:
        super().__init__()
        self._run_id: str = run_id

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = self._run_id
        return True
