"""Constants and enums for SMS notification dispatch."""

from enum import StrEnum
from typing import Final


class NotificationKind(StrEnum):
    """Notification kinds the platform sends by SMS."""

    RETURN_REMINDER = "return_reminder"
    OVERDUE = "overdue"
    PICKUP = "pickup"
    RENTAL_APPROVED = "rental_approved"
    RENTAL_REJECTED = "rental_rejected"
    PAYMENT_CONFIRMATION = "payment_confirmation"
    TWO_FACTOR_CODE = "two_factor_code"
    SECURITY_ALERT = "security_alert"


class DeliveryOutcome(StrEnum):
    """Outcome recorded for a single delivery attempt."""

    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"


class SecurityAlertType(StrEnum):
    """Security alert types with a dedicated message."""

    LOGIN_NEW_DEVICE = "login_new_device"
    PASSWORD_CHANGED = "password_changed"
    SUSPICIOUS_ACTIVITY = "suspicious_activity"


REQUIRED_PARAMETERS: Final[dict[NotificationKind, tuple[str, ...]]] = {
    NotificationKind.RETURN_REMINDER: ("tool_name", "return_date"),
    NotificationKind.OVERDUE: ("tool_name", "days_overdue"),
    NotificationKind.PICKUP: ("tool_name", "pickup_date"),
    NotificationKind.RENTAL_APPROVED: ("tool_name", "start_date"),
    NotificationKind.RENTAL_REJECTED: ("tool_name", "reason"),
    NotificationKind.PAYMENT_CONFIRMATION: ("tool_name", "amount"),
    NotificationKind.TWO_FACTOR_CODE: ("code",),
    NotificationKind.SECURITY_ALERT: ("alert_type",),
}

# Kinds retried under the reduced retry budget
LATENCY_SENSITIVE_KINDS: Final[frozenset[NotificationKind]] = frozenset({
    NotificationKind.TWO_FACTOR_CODE,
    NotificationKind.SECURITY_ALERT,
})

DEFAULT_BRAND_NAME: Final[str] = "NeighborTools"
DEFAULT_COUNTRY_CODE: Final[str] = "1"
DATE_FORMAT: Final[str] = "%b %d, %Y"

# Single GSM-7 segment
MAX_SEGMENT_LENGTH: Final[int] = 160

# North American numbering plan: optional +, optional 1, 3-3-4 digits with separators
NANP_PATTERN: Final[str] = (
    r"^\+?1?[-. ]?\(?(?P<area>[0-9]{3})\)?[-. ]?(?P<exchange>[0-9]{3})[-. ]?(?P<line>[0-9]{4})$"
)

DEFAULT_MAX_ATTEMPTS: Final[int] = 3
DEFAULT_LATENCY_SENSITIVE_MAX_ATTEMPTS: Final[int] = 2
DEFAULT_INITIAL_BACKOFF_SECONDS: Final[float] = 1.0
DEFAULT_BACKOFF_MULTIPLIER: Final[float] = 2.0
DEFAULT_MAX_BACKOFF_SECONDS: Final[float] = 15.0
DEFAULT_MAX_TOTAL_WAIT_SECONDS: Final[float] = 30.0

__all__ = [
    "NotificationKind",
    "DeliveryOutcome",
    "SecurityAlertType",
    "REQUIRED_PARAMETERS",
    "LATENCY_SENSITIVE_KINDS",
    "DEFAULT_BRAND_NAME",
    "DEFAULT_COUNTRY_CODE",
    "DATE_FORMAT",
    "MAX_SEGMENT_LENGTH",
    "NANP_PATTERN",
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_LATENCY_SENSITIVE_MAX_ATTEMPTS",
    "DEFAULT_INITIAL_BACKOFF_SECONDS",
    "DEFAULT_BACKOFF_MULTIPLIER",
    "DEFAULT_MAX_BACKOFF_SECONDS",
    "DEFAULT_MAX_TOTAL_WAIT_SECONDS",
]
