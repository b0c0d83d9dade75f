"""Caller-facing SMS notification service.

Wraps a DeliveryDispatcher with one entry point per notification kind. All
methods return the final DeliveryAttempt; none raise for delivery problems.
Safe to call concurrently from multiple threads.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from smsdispatch.common.config import SmsDispatchConfig
from smsdispatch.common.constants import NotificationKind
from smsdispatch.common.models import DeliveryAttempt, NotificationRequest
from smsdispatch.composer.templates import MessageComposer
from smsdispatch.notifications.dispatch import DeliveryDispatcher, DispatchConfig
from smsdispatch.notifications.provider import LoggingSmsProvider, SmsProvider
from smsdispatch.notifications.store import DeliveryStatusStore
from smsdispatch.validation.phone import NumberingPlan, PhoneNumber, PhoneValidator

logger = logging.getLogger(__name__)


class SmsNotificationService:
    """Send platform notifications by SMS."""

    def __init__(self, dispatcher: DeliveryDispatcher, validator: PhoneValidator | None = None) -> None:
        self._dispatcher = dispatcher
        self._validator = validator or dispatcher.validator

    @classmethod
    def from_config(
        cls,
        config: SmsDispatchConfig | None = None,
        provider: SmsProvider | None = None,
        store: DeliveryStatusStore | None = None,
    ) -> SmsNotificationService:
        """Build a service wired from settings. Defaults to the logging provider."""
        config = config or SmsDispatchConfig()
        if provider is None:
            logger.warning("No SMS provider configured; messages will only be logged")
            provider = LoggingSmsProvider()
        validator = PhoneValidator(NumberingPlan.from_settings(config))
        dispatcher = DeliveryDispatcher(
            provider=provider,
            validator=validator,
            composer=MessageComposer.from_settings(config),
            store=store,
            config=DispatchConfig.from_settings(config),
        )
        return cls(dispatcher, validator)

    @property
    def dispatcher(self) -> DeliveryDispatcher:
        return self._dispatcher

    @property
    def store(self) -> DeliveryStatusStore:
        return self._dispatcher.store

    @property
    def validator(self) -> PhoneValidator:
        return self._validator

    def send_notification(
        self,
        kind: NotificationKind | str,
        destination: str | None,
        parameters: Mapping[str, Any] | None = None,
        timeout: float | None = None,
        cancel: threading.Event | None = None,
    ) -> DeliveryAttempt:
        request = NotificationRequest(
            kind=NotificationKind(kind),
            destination=destination,
            parameters=parameters or {},
        )
        return self._dispatcher.send(request, timeout=timeout, cancel=cancel)

    # --- Per-kind helpers ---

    def send_return_reminder(
        self, phone_number: str | None, tool_name: str, return_date: date | datetime,
    ) -> DeliveryAttempt:
        return self.send_notification(
            NotificationKind.RETURN_REMINDER, phone_number,
            {"tool_name": tool_name, "return_date": return_date},
        )

    def send_overdue_notification(
        self, phone_number: str | None, tool_name: str, days_overdue: int,
    ) -> DeliveryAttempt:
        return self.send_notification(
            NotificationKind.OVERDUE, phone_number,
            {"tool_name": tool_name, "days_overdue": days_overdue},
        )

    def send_pickup_reminder(
        self, phone_number: str | None, tool_name: str, pickup_date: date | datetime,
    ) -> DeliveryAttempt:
        return self.send_notification(
            NotificationKind.PICKUP, phone_number,
            {"tool_name": tool_name, "pickup_date": pickup_date},
        )

    def send_rental_approved(
        self, phone_number: str | None, tool_name: str, start_date: date | datetime,
    ) -> DeliveryAttempt:
        return self.send_notification(
            NotificationKind.RENTAL_APPROVED, phone_number,
            {"tool_name": tool_name, "start_date": start_date},
        )

    def send_rental_rejected(
        self, phone_number: str | None, tool_name: str, reason: str,
    ) -> DeliveryAttempt:
        return self.send_notification(
            NotificationKind.RENTAL_REJECTED, phone_number,
            {"tool_name": tool_name, "reason": reason},
        )

    def send_payment_confirmation(
        self, phone_number: str | None, tool_name: str, amount: Decimal | float | str,
    ) -> DeliveryAttempt:
        return self.send_notification(
            NotificationKind.PAYMENT_CONFIRMATION, phone_number,
            {"tool_name": tool_name, "amount": amount},
        )

    def send_two_factor_code(self, phone_number: str | None, code: str) -> DeliveryAttempt:
        return self.send_notification(
            NotificationKind.TWO_FACTOR_CODE, phone_number, {"code": code},
        )

    def send_security_alert(self, phone_number: str | None, alert_type: str) -> DeliveryAttempt:
        return self.send_notification(
            NotificationKind.SECURITY_ALERT, phone_number, {"alert_type": alert_type},
        )

    # --- Queries ---

    def validate_phone_number(self, phone_number: str | None) -> PhoneNumber:
        """Raise EmptyInput or FormatError for unusable numbers."""
        return self._validator.validate(phone_number)

    def delivery_history(self, request_id: str) -> tuple[DeliveryAttempt, ...]:
        return self.store.lookup(request_id)

    def get_stats(self) -> dict[str, Any]:
        return self.store.get_stats()


__all__ = ["SmsNotificationService"]
