"""Tests for the caller-facing SMS notification service."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from decimal import Decimal

import pytest

from smsdispatch.common.config import SmsDispatchConfig
from smsdispatch.common.constants import DeliveryOutcome, NotificationKind
from smsdispatch.common.errors import EmptyInput, FormatError
from smsdispatch.notifications.dispatch import DeliveryDispatcher
from smsdispatch.notifications.provider import LoggingSmsProvider, ProviderResult
from smsdispatch.notifications.service import SmsNotificationService
from smsdispatch.notifications.store import DeliveryStatusStore
from smsdispatch.validation.phone import NumberingPlan, PhoneValidator


# --- Helpers ---


class CountingProvider:
    def __init__(self, result: ProviderResult | None = None) -> None:
        self.result = result or ProviderResult.success("msg-1")
        self.calls: list[tuple[str, str]] = []
        self._lock = threading.Lock()

    def send(self, phone_number: str, text: str) -> ProviderResult:
        with self._lock:
            self.calls.append((phone_number, text))
        return self.result


def _service(provider=None, **settings) -> SmsNotificationService:
    settings.setdefault("initial_backoff_seconds", 0.0)
    return SmsNotificationService.from_config(
        SmsDispatchConfig(**settings), provider=provider or CountingProvider(),
    )


PHONE = "+15551234567"


# --- Factory Tests ---


def test_from_config_defaults_to_logging_provider():
    service = SmsNotificationService.from_config()
    attempt = service.send_two_factor_code(PHONE, "123456")
    assert attempt.outcome == DeliveryOutcome.SENT
    assert attempt.message_id.startswith("log-")


def test_from_config_applies_settings():
    provider = CountingProvider(ProviderResult.transient("busy"))
    service = _service(provider, max_attempts=5, latency_sensitive_max_attempts=1)

    service.send_overdue_notification(PHONE, "Ladder", 2)
    assert len(provider.calls) == 5

    provider.calls.clear()
    service.send_two_factor_code(PHONE, "123456")
    assert len(provider.calls) == 1


def test_from_config_brand_and_length():
    provider = CountingProvider()
    service = _service(provider, brand_name="ToolShare")
    service.send_security_alert(PHONE, "password_changed")
    assert "Your ToolShare password has been changed" in provider.calls[0][1]

    short = _service(CountingProvider(), max_message_length=20)
    attempt = short.send_two_factor_code(PHONE, "123456")
    assert attempt.error_code == "message_too_long"


def test_from_config_uses_given_store():
    store = DeliveryStatusStore()
    service = SmsNotificationService.from_config(provider=CountingProvider(), store=store)
    service.send_two_factor_code(PHONE, "123456")
    assert service.store is store
    assert len(store) == 1


# --- send_notification Tests ---


def test_send_notification_scenario_two_factor():
    provider = CountingProvider()
    service = _service(provider)

    attempt = service.send_notification(NotificationKind.TWO_FACTOR_CODE, PHONE, {"code": "482913"})

    assert attempt.outcome == DeliveryOutcome.SENT
    assert attempt.attempt_number == 1
    assert "482913" in attempt.text
    assert provider.calls[0] == (PHONE, attempt.text)


def test_send_notification_accepts_string_kind():
    attempt = _service().send_notification("security_alert", PHONE, {"alert_type": "unknown_case"})
    assert attempt.kind == NotificationKind.SECURITY_ALERT
    assert "unknown_case detected" in attempt.text


def test_send_notification_unknown_kind_raises():
    with pytest.raises(ValueError):
        _service().send_notification("carrier_pigeon", PHONE, {})


def test_send_notification_empty_destination():
    provider = CountingProvider()
    attempt = _service(provider).send_notification(NotificationKind.PICKUP, "", {})
    assert attempt.outcome == DeliveryOutcome.SKIPPED
    assert attempt.error_code == "empty_input"
    assert provider.calls == []


def test_send_notification_permanent_failure():
    provider = CountingProvider(ProviderResult.permanent("unreachable"))
    attempt = _service(provider).send_rental_rejected(PHONE, "Saw", "Unavailable")
    assert attempt.outcome == DeliveryOutcome.FAILED
    assert len(provider.calls) == 1


def test_send_notification_cancel():
    cancel = threading.Event()
    cancel.set()
    provider = CountingProvider()
    attempt = _service(provider).send_notification(
        NotificationKind.TWO_FACTOR_CODE, PHONE, {"code": "1"}, cancel=cancel,
    )
    assert attempt.is_cancelled is True
    assert provider.calls == []


# --- Per-kind Helper Tests ---


def test_per_kind_helpers():
    provider = CountingProvider()
    service = _service(provider)
    when = date(2026, 10, 18)

    attempts = [
        service.send_return_reminder(PHONE, "Drill", when),
        service.send_overdue_notification(PHONE, "Drill", 4),
        service.send_pickup_reminder(PHONE, "Drill", when),
        service.send_rental_approved(PHONE, "Drill", when),
        service.send_rental_rejected(PHONE, "Drill", "Owner unavailable"),
        service.send_payment_confirmation(PHONE, "Drill", Decimal("42.5")),
        service.send_two_factor_code(PHONE, "999000"),
        service.send_security_alert(PHONE, "login_new_device"),
    ]

    assert [a.kind for a in attempts] == list(NotificationKind)
    assert all(a.outcome == DeliveryOutcome.SENT for a in attempts)
    texts = [text for _, text in provider.calls]
    assert "due for return on Oct 18, 2026" in texts[0]
    assert "4 day(s) overdue" in texts[1]
    assert "$42.50" in texts[5]
    assert "999000" in texts[6]


def test_helper_with_missing_phone_is_skipped():
    provider = CountingProvider()
    attempt = _service(provider).send_return_reminder(None, "Drill", date(2026, 10, 18))
    assert attempt.error_code == "empty_input"
    assert provider.calls == []


# --- Query Tests ---


def test_validate_phone_number():
    service = _service()
    assert service.validate_phone_number("555.123.4567").e164 == PHONE
    with pytest.raises(EmptyInput):
        service.validate_phone_number(None)
    with pytest.raises(FormatError):
        service.validate_phone_number("555")


def test_wrapped_dispatcher_validator_is_reused():
    provider = CountingProvider()
    validator = PhoneValidator(NumberingPlan(pattern=r"^[0-9]{9}$", country_code="33"))
    dispatcher = DeliveryDispatcher(provider=provider, validator=validator)
    service = SmsNotificationService(dispatcher)

    assert service.validator is dispatcher.validator
    assert service.validate_phone_number("612345678").e164 == "+33612345678"
    with pytest.raises(FormatError):
        service.validate_phone_number("5551234567")

    attempt = service.send_two_factor_code("612345678", "123456")
    assert attempt.outcome == DeliveryOutcome.SENT
    assert provider.calls[0][0] == "+33612345678"


def test_explicit_validator_overrides_dispatcher():
    dispatcher = DeliveryDispatcher(provider=CountingProvider())
    validator = PhoneValidator(NumberingPlan(pattern=r"^[0-9]{9}$", country_code="33"))
    service = SmsNotificationService(dispatcher, validator)
    assert service.validator is validator


def test_delivery_history_and_stats():
    provider = CountingProvider(ProviderResult.transient("busy"))
    service = _service(provider)

    attempt = service.send_overdue_notification(PHONE, "Drill", 1)
    history = service.delivery_history(attempt.request_id)

    assert len(history) == 3
    assert history[-1] == attempt
    stats = service.get_stats()
    assert stats["total_attempts"] == 3
    assert stats["by_outcome"] == {"failed": 3}


def test_concurrent_send_notification():
    service = SmsNotificationService.from_config(provider=LoggingSmsProvider())

    def send(i: int):
        return service.send_two_factor_code(PHONE, f"{i:06d}")

    with ThreadPoolExecutor(max_workers=8) as pool:
        attempts = list(pool.map(send, range(100)))

    assert len({a.request_id for a in attempts}) == 100
    assert service.get_stats()["by_outcome"] == {"sent": 100}
