#!/usr/bin/env python3
"""
SMS Dispatch Demo Script.

Walks through the notification service end to end without a real gateway:
1. Every notification kind sent through the logging provider.
2. A flaky provider that times out before succeeding (retry with backoff).
3. Skipped deliveries: empty phone, bad format, missing parameter.

Usage:
    python demo.py
"""

import sys
import os
from datetime import date
from decimal import Decimal

# Ensure src is in python path
sys.path.append(os.path.join(os.getcwd(), "src"))

try:
    from smsdispatch.common.config import SmsDispatchConfig, configure_logging
    from smsdispatch.common.constants import NotificationKind
    from smsdispatch.notifications.provider import LoggingSmsProvider, ProviderResult
    from smsdispatch.notifications.service import SmsNotificationService
except ImportError as e:
    print(f"Error importing modules: {e}")
    print("Please ensure you have installed dependencies via pip install -e .")
    sys.exit(1)


class FlakyProvider:
    """Times out a fixed number of times, then delivers."""

    def __init__(self, failures: int) -> None:
        self._remaining = failures
        self._delegate = LoggingSmsProvider(prefix="flaky")

    def send(self, phone_number, text):
        if self._remaining > 0:
            self._remaining -= 1
            return ProviderResult.transient("gateway timeout")
        return self._delegate.send(phone_number, text)


def _show(label, attempt):
    detail = attempt.message_id or attempt.error_code
    print(f"    {label:<22} -> {attempt.outcome.upper():<7} attempt={attempt.attempt_number} ({detail})")


def run_demo():
    config = SmsDispatchConfig(initial_backoff_seconds=0.2)
    configure_logging(config)

    print("========================================")
    print("   SMS Dispatch Demo")
    print("========================================")

    phone = "(555) 123-4567"
    today = date.today()

    # 1. Every kind through the logging provider
    print("\n[1] Sending every notification kind...")
    service = SmsNotificationService.from_config(config, provider=LoggingSmsProvider())
    _show("return reminder", service.send_return_reminder(phone, "Cordless Drill", today))
    _show("overdue", service.send_overdue_notification(phone, "Cordless Drill", 2))
    _show("pickup", service.send_pickup_reminder(phone, "Cordless Drill", today))
    _show("rental approved", service.send_rental_approved(phone, "Cordless Drill", today))
    _show("rental rejected", service.send_rental_rejected(phone, "Cordless Drill", "Owner away"))
    _show("payment", service.send_payment_confirmation(phone, "Cordless Drill", Decimal("34.5")))
    _show("two-factor", service.send_two_factor_code(phone, "482913"))
    _show("security alert", service.send_security_alert(phone, "login_new_device"))

    # 2. Retry with backoff
    print("\n[2] Flaky provider (2 timeouts, then success)...")
    flaky = SmsNotificationService.from_config(config, provider=FlakyProvider(failures=2))
    attempt = flaky.send_overdue_notification(phone, "Ladder", 5)
    for step in flaky.delivery_history(attempt.request_id):
        _show(f"attempt {step.attempt_number}", step)

    # 3. Skips
    print("\n[3] Local failures are skipped, never raised...")
    _show("empty phone", service.send_two_factor_code("", "111111"))
    _show("bad format", service.send_two_factor_code("12345", "111111"))
    _show("missing parameter", service.send_notification(NotificationKind.PICKUP, phone, {}))

    print("\n[4] Delivery stats")
    for key, value in service.get_stats().items():
        print(f"    {key}: {value}")

    print("\n========================================")
    print("Demo complete.")

if __name__ == "__main__":
    run_demo()
