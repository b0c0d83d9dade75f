"""Error taxonomy for SMS dispatch.

Every error carries a stable ``code`` (recorded on delivery attempts) and a
``retryable`` flag. Validation and composition errors are local and never
retried; transient provider errors are.
"""

from __future__ import annotations


class NotificationError(Exception):
    """Base class for all dispatch errors."""

    code: str = "unknown"
    retryable: bool = False

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)


# --- Validation ---


class ValidationError(NotificationError):
    """Destination phone number was rejected."""

    code = "validation_error"


class EmptyInput(ValidationError):
    code = "empty_input"

    def __init__(self, message: str = "Phone number cannot be null or empty") -> None:
        super().__init__(message)


class FormatError(ValidationError):
    code = "format_error"

    def __init__(self, raw: str, message: str = "") -> None:
        self.raw = raw
        super().__init__(message or f"Invalid phone number format: {raw!r}")


# --- Composition ---


class CompositionError(NotificationError):
    """Message text could not be produced."""

    code = "composition_error"


class MissingParameter(CompositionError):
    code = "missing_parameter"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Missing required parameter: {name}")


class InvalidParameter(CompositionError):
    code = "invalid_parameter"

    def __init__(self, name: str, value: object) -> None:
        self.name = name
        self.value = value
        super().__init__(f"Invalid value for parameter {name}: {value!r}")


class MessageTooLong(CompositionError):
    code = "message_too_long"

    def __init__(self, length: int, limit: int) -> None:
        self.length = length
        self.limit = limit
        super().__init__(f"Message is {length} characters, limit is {limit}")


# --- Provider ---


class ProviderError(NotificationError):
    """Raised by provider bindings that prefer exceptions over results."""

    code = "provider_error"


class TransientProviderError(ProviderError):
    """Retryable: timeout, rate limit, intermittent gateway failure."""

    code, retryable = "transient", True


class PermanentProviderError(ProviderError):
    """Do not retry: carrier rejected destination, bad request, blocked sender."""

    code, retryable = "permanent", False


# --- Control ---


class Cancelled(NotificationError):
    """Caller cancelled or the deadline expired before delivery finished."""

    code = "cancelled"


__all__ = [
    "NotificationError",
    "ValidationError",
    "EmptyInput",
    "FormatError",
    "CompositionError",
    "MissingParameter",
    "InvalidParameter",
    "MessageTooLong",
    "ProviderError",
    "TransientProviderError",
    "PermanentProviderError",
    "Cancelled",
]
