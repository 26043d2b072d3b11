"""Shared error taxonomy for fleet-controller."""

from __future__ import annotations

from typing import Any, Mapping, TypeVar


def _normalize_context_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return normalize_context(value)
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_normalize_context_value(item) for item in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def normalize_context(context: Mapping[str, Any]) -> dict[str, Any]:
    """Return a JSON-friendly copy of an error context mapping."""
    return {key: _normalize_context_value(val) for key, val in context.items()}


class FCError(Exception):
    """Base error type for typed failure handling."""

    def __init__(
        self,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.context = normalize_context(context or {})
        if cause is not None:
            self.__cause__ = cause

    @property
    def error_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.error_type, "message": str(self), "context": self.context}


class ConfigurationError(FCError):
    """Invalid or incomplete topology configuration; raised before any dispatch."""


class StatePreconditionError(FCError):
    """A lifecycle transition was attempted from a state that forbids it."""


class CommandExecutionError(FCError):
    """A local process or remote shell command failed."""


class DispatchFailure(FCError):
    """A single role/host/instance control call failed."""


class AdministrativeShutdownFailure(FCError):
    """The administrative request to the coordinator failed."""


class CleanupFailure(FCError):
    """Purging stale coordination-service registrations failed."""


T = TypeVar("T", bound=FCError)


def wrap_error(
    error_cls: type[T],
    message: str,
    *,
    context: Mapping[str, Any] | None = None,
    cause: Exception | None = None,
) -> T:
    """Create a typed FCError with optional context and cause."""
    return error_cls(message, context=context, cause=cause)


def error_to_payload(error: FCError) -> dict[str, Any]:
    """Convert an FCError to a report payload."""
    return {
        "error_type": error.error_type,
        "error": str(error),
        "error_context": error.context,
    }
