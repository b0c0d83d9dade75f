"""SMS notification dispatch."""

from __future__ import annotations

from smsdispatch.notifications.dispatch import (
    DeliveryDispatcher,
    DispatchConfig,
    RetryPolicy,
)
from smsdispatch.notifications.provider import (
    LoggingSmsProvider,
    ProviderResult,
    ProviderStatus,
    SmsProvider,
    classify_exception,
)
from smsdispatch.notifications.service import SmsNotificationService
from smsdispatch.notifications.store import DeliveryStatusStore

__all__ = [
    "DeliveryDispatcher",
    "DeliveryStatusStore",
    "DispatchConfig",
    "LoggingSmsProvider",
    "ProviderResult",
    "ProviderStatus",
    "RetryPolicy",
    "SmsNotificationService",
    "SmsProvider",
    "classify_exception",
]
