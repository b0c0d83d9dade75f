"""Message composition for each notification kind.

Each kind maps to one fixed template. Required parameters are checked before
rendering; dates render as ``Oct 18, 2026`` and amounts with two decimals.
Rendered text must fit in a single provider segment.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from smsdispatch.common.config import SmsDispatchConfig
from smsdispatch.common.constants import (
    DATE_FORMAT,
    DEFAULT_BRAND_NAME,
    MAX_SEGMENT_LENGTH,
    REQUIRED_PARAMETERS,
    NotificationKind,
    SecurityAlertType,
)
from smsdispatch.common.errors import InvalidParameter, MessageTooLong, MissingParameter
from smsdispatch.common.models import RenderedMessage

_CENTS = Decimal("0.01")


# --- Parameter coercion ---


def _require(parameters: Mapping[str, Any], name: str) -> Any:
    value = parameters.get(name)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise MissingParameter(name)
    return value


def _text(parameters: Mapping[str, Any], name: str) -> str:
    return str(_require(parameters, name)).strip()


def _date(parameters: Mapping[str, Any], name: str) -> str:
    value = _require(parameters, name)
    if isinstance(value, (date, datetime)):
        return value.strftime(DATE_FORMAT)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip()).strftime(DATE_FORMAT)
        except ValueError:
            raise InvalidParameter(name, value) from None
    raise InvalidParameter(name, value)


def _count(parameters: Mapping[str, Any], name: str) -> int:
    value = _require(parameters, name)
    if isinstance(value, bool):
        raise InvalidParameter(name, value)
    try:
        count = int(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidParameter(name, value) from None
    if count < 0:
        raise InvalidParameter(name, value)
    return count


def _amount(parameters: Mapping[str, Any], name: str) -> str:
    value = _require(parameters, name)
    if isinstance(value, bool):
        raise InvalidParameter(name, value)
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise InvalidParameter(name, value) from None
    if not amount.is_finite():
        raise InvalidParameter(name, value)
    try:
        return str(amount.quantize(_CENTS, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        raise InvalidParameter(name, value) from None


# --- Composer ---


class MessageComposer:
    """Render notification kinds into bounded-length SMS text."""

    def __init__(
        self,
        brand_name: str = DEFAULT_BRAND_NAME,
        max_length: int = MAX_SEGMENT_LENGTH,
    ) -> None:
        self._brand = brand_name
        self._max_length = max_length
        self._renderers: dict[NotificationKind, Callable[[Mapping[str, Any]], str]] = {
            NotificationKind.RETURN_REMINDER: self._return_reminder,
            NotificationKind.OVERDUE: self._overdue,
            NotificationKind.PICKUP: self._pickup,
            NotificationKind.RENTAL_APPROVED: self._rental_approved,
            NotificationKind.RENTAL_REJECTED: self._rental_rejected,
            NotificationKind.PAYMENT_CONFIRMATION: self._payment_confirmation,
            NotificationKind.TWO_FACTOR_CODE: self._two_factor_code,
            NotificationKind.SECURITY_ALERT: self._security_alert,
        }
        self._security_alerts: dict[str, str] = {
            SecurityAlertType.LOGIN_NEW_DEVICE: (
                f"Security alert: New device login detected on your {brand_name} account. "
                "If this wasn't you, please change your password immediately."
            ),
            SecurityAlertType.PASSWORD_CHANGED: (
                f"Security alert: Your {brand_name} password has been changed. "
                "If this wasn't you, please contact support immediately."
            ),
            SecurityAlertType.SUSPICIOUS_ACTIVITY: (
                f"Security alert: Suspicious activity detected on your {brand_name} account. "
                "Please review your account and contact support if needed."
            ),
        }

    @classmethod
    def from_settings(cls, settings: SmsDispatchConfig) -> MessageComposer:
        return cls(brand_name=settings.brand_name, max_length=settings.max_message_length)

    @property
    def max_length(self) -> int:
        return self._max_length

    def required_parameters(self, kind: NotificationKind) -> tuple[str, ...]:
        return REQUIRED_PARAMETERS[NotificationKind(kind)]

    def render(self, kind: NotificationKind, parameters: Mapping[str, Any]) -> RenderedMessage:
        """Render a kind with its parameters.

        Raises MissingParameter, InvalidParameter or MessageTooLong.
        """
        kind = NotificationKind(kind)
        for name in REQUIRED_PARAMETERS[kind]:
            _require(parameters, name)

        text = self._renderers[kind](parameters)
        if len(text) > self._max_length:
            raise MessageTooLong(len(text), self._max_length)
        return RenderedMessage(kind=kind, text=text)

    # --- Templates ---

    def _return_reminder(self, p: Mapping[str, Any]) -> str:
        return (
            f"Reminder: Your rental of '{_text(p, 'tool_name')}' is due for return on "
            f"{_date(p, 'return_date')}. Please return it on time to avoid late fees."
        )

    def _overdue(self, p: Mapping[str, Any]) -> str:
        return (
            f"URGENT: Your rental of '{_text(p, 'tool_name')}' is "
            f"{_count(p, 'days_overdue')} day(s) overdue. Please return it immediately "
            "to avoid additional fees. Contact support if needed."
        )

    def _pickup(self, p: Mapping[str, Any]) -> str:
        return (
            f"Pickup reminder: Your rental of '{_text(p, 'tool_name')}' is ready for pickup "
            f"today ({_date(p, 'pickup_date')}). Please coordinate with the owner."
        )

    def _rental_approved(self, p: Mapping[str, Any]) -> str:
        return (
            f"Great news! Your rental request for '{_text(p, 'tool_name')}' has been approved. "
            f"Rental starts on {_date(p, 'start_date')}. Complete payment to confirm."
        )

    def _rental_rejected(self, p: Mapping[str, Any]) -> str:
        return (
            f"Your rental request for '{_text(p, 'tool_name')}' was declined. "
            f"Reason: {_text(p, 'reason')}. Browse other available tools on our platform."
        )

    def _payment_confirmation(self, p: Mapping[str, Any]) -> str:
        return (
            f"Payment confirmed! ${_amount(p, 'amount')} for '{_text(p, 'tool_name')}' rental. "
            "Your booking is now confirmed. You'll receive pickup instructions soon."
        )

    def _two_factor_code(self, p: Mapping[str, Any]) -> str:
        return (
            f"Your {self._brand} verification code is: {_text(p, 'code')}. "
            "This code expires in 5 minutes. Do not share this code with anyone."
        )

    def _security_alert(self, p: Mapping[str, Any]) -> str:
        alert_type = _text(p, "alert_type")
        known = self._security_alerts.get(alert_type)
        if known is not None:
            return known
        return (
            f"Security alert: {alert_type} detected on your {self._brand} account. "
            "Please review your account."
        )


__all__ = ["MessageComposer"]
