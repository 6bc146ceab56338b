"""
Exceptions raised by the Beebot monitoring pipeline.

Per-source, per-channel and store failures are handled at the boundary of
the component that raised them and never escape a run. Only configuration
errors are allowed to stop the process, before any run starts.
"""


class BeebotError(Exception):
    """Base class for all Beebot errors."""


class DeliveryError(BeebotError):
    """Raised when a notification channel rejects a message."""


class ConfigurationError(BeebotError, ValueError):
    """Raised when the run context is missing required settings."""
