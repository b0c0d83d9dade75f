"""Common constants, models, errors and configuration for SMS dispatch."""

from smsdispatch.common.constants import (
    LATENCY_SENSITIVE_KINDS,
    REQUIRED_PARAMETERS,
    DeliveryOutcome,
    NotificationKind,
    SecurityAlertType,
)
from smsdispatch.common.models import (
    DeliveryAttempt,
    NotificationRequest,
    RenderedMessage,
)

__all__ = [
    "NotificationKind",
    "DeliveryOutcome",
    "SecurityAlertType",
    "REQUIRED_PARAMETERS",
    "LATENCY_SENSITIVE_KINDS",
    "NotificationRequest",
    "RenderedMessage",
    "DeliveryAttempt",
]
