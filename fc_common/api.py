"""Public API surface for fc_common."""

from fc_common.errors import (
    AdministrativeShutdownFailure,
    CleanupFailure,
    CommandExecutionError,
    ConfigurationError,
    DispatchFailure,
    FCError,
    StatePreconditionError,
    error_to_payload,
    wrap_error,
)
from fc_common.logging import configure_logging

__all__ = [
    "AdministrativeShutdownFailure",
    "CleanupFailure",
    "CommandExecutionError",
    "ConfigurationError",
    "DispatchFailure",
    "FCError",
    "StatePreconditionError",
    "configure_logging",
    "error_to_payload",
    "wrap_error",
]
