"""SMS delivery dispatch.

Validates the destination, renders the message and hands it to the provider
with bounded retry:

- Validation and composition failures are recorded as SKIPPED, provider never called.
- Transient provider failures retry with exponential backoff until the attempt
  budget or the total wait budget runs out.
- Permanent provider failures are recorded as FAILED with no retry.
- TWO_FACTOR_CODE and SECURITY_ALERT use a reduced retry budget.

Every step is appended to the DeliveryStatusStore, and ``send`` returns the
final DeliveryAttempt instead of raising.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from smsdispatch.common.config import SmsDispatchConfig
from smsdispatch.common.constants import (
    DEFAULT_BACKOFF_MULTIPLIER,
    DEFAULT_INITIAL_BACKOFF_SECONDS,
    DEFAULT_LATENCY_SENSITIVE_MAX_ATTEMPTS,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_BACKOFF_SECONDS,
    DEFAULT_MAX_TOTAL_WAIT_SECONDS,
    LATENCY_SENSITIVE_KINDS,
    DeliveryOutcome,
    NotificationKind,
)
from smsdispatch.common.errors import (
    Cancelled,
    CompositionError,
    NotificationError,
    ValidationError,
)
from smsdispatch.common.models import DeliveryAttempt, NotificationRequest, RenderedMessage
from smsdispatch.composer.templates import MessageComposer
from smsdispatch.notifications.provider import (
    ProviderResult,
    ProviderStatus,
    SmsProvider,
    classify_exception,
)
from smsdispatch.notifications.store import DeliveryStatusStore
from smsdispatch.validation.phone import PhoneNumber, PhoneValidator, mask_phone

logger = logging.getLogger(__name__)


# --- Configuration ---


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff for transient provider failures."""

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    initial_backoff_seconds: float = DEFAULT_INITIAL_BACKOFF_SECONDS
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER
    max_backoff_seconds: float = DEFAULT_MAX_BACKOFF_SECONDS
    max_total_wait_seconds: float = DEFAULT_MAX_TOTAL_WAIT_SECONDS

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")

    def backoff_for(self, retry_number: int) -> float:
        """Delay before the given retry (1 = first retry)."""
        delay = self.initial_backoff_seconds * self.backoff_multiplier ** (retry_number - 1)
        return min(delay, self.max_backoff_seconds)


@dataclass(frozen=True)
class DispatchConfig:
    """Retry policies per notification kind."""

    standard_policy: RetryPolicy = field(default_factory=RetryPolicy)
    latency_sensitive_policy: RetryPolicy = field(
        default_factory=lambda: RetryPolicy(max_attempts=DEFAULT_LATENCY_SENSITIVE_MAX_ATTEMPTS),
    )
    latency_sensitive_kinds: frozenset[NotificationKind] = LATENCY_SENSITIVE_KINDS

    @classmethod
    def from_settings(cls, settings: SmsDispatchConfig) -> DispatchConfig:
        standard = RetryPolicy(
            max_attempts=settings.max_attempts,
            initial_backoff_seconds=settings.initial_backoff_seconds,
            backoff_multiplier=settings.backoff_multiplier,
            max_backoff_seconds=settings.max_backoff_seconds,
            max_total_wait_seconds=settings.max_total_wait_seconds,
        )
        latency_sensitive = RetryPolicy(
            max_attempts=settings.latency_sensitive_max_attempts,
            initial_backoff_seconds=settings.initial_backoff_seconds,
            backoff_multiplier=settings.backoff_multiplier,
            max_backoff_seconds=settings.max_backoff_seconds,
            max_total_wait_seconds=settings.max_total_wait_seconds,
        )
        return cls(standard_policy=standard, latency_sensitive_policy=latency_sensitive)

    def policy_for(self, kind: NotificationKind) -> RetryPolicy:
        if kind in self.latency_sensitive_kinds:
            return self.latency_sensitive_policy
        return self.standard_policy


# --- Dispatcher ---


class DeliveryDispatcher:
    """Orchestrates validation, composition, provider calls and status recording."""

    def __init__(
        self,
        provider: SmsProvider,
        validator: PhoneValidator | None = None,
        composer: MessageComposer | None = None,
        store: DeliveryStatusStore | None = None,
        config: DispatchConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._provider = provider
        self._validator = validator or PhoneValidator()
        self._composer = composer or MessageComposer()
        self._store = store if store is not None else DeliveryStatusStore()
        self._config = config or DispatchConfig()
        self._sleep = sleep
        self._clock = clock

    @property
    def config(self) -> DispatchConfig:
        return self._config

    @property
    def store(self) -> DeliveryStatusStore:
        return self._store

    @property
    def validator(self) -> PhoneValidator:
        return self._validator

    def send(
        self,
        request: NotificationRequest,
        *,
        timeout: float | None = None,
        cancel: threading.Event | None = None,
    ) -> DeliveryAttempt:
        """Deliver one request and return the final recorded attempt."""
        deadline = self._clock() + timeout if timeout is not None else None

        if cancel is not None and cancel.is_set():
            return self._skip(request, request.destination, None,
                              Cancelled("Cancelled before dispatch"))

        try:
            phone = self._validator.validate(request.destination)
        except ValidationError as exc:
            return self._skip(request, request.destination, None, exc)

        try:
            message = self._composer.render(request.kind, request.parameters)
        except CompositionError as exc:
            return self._skip(request, phone.e164, None, exc)

        if deadline is not None and self._clock() >= deadline:
            return self._skip(request, phone.e164, message,
                              Cancelled("Deadline expired before dispatch"))

        policy = self._config.policy_for(request.kind)
        waited = 0.0
        for call in range(1, policy.max_attempts + 1):
            result = self._call_provider(phone, message)

            if result.status == ProviderStatus.OK:
                attempt = self._record(
                    request, phone.e164, DeliveryOutcome.SENT,
                    message=message, message_id=result.message_id,
                )
                logger.info(
                    "Sent %s to %s (request=%s, attempt=%d, message_id=%s)",
                    request.kind, mask_phone(phone.e164), request.request_id,
                    attempt.attempt_number, result.message_id,
                )
                return attempt

            attempt = self._record(
                request, phone.e164, DeliveryOutcome.FAILED,
                message=message, error_code=result.status.value, error_detail=result.error,
            )

            if result.status == ProviderStatus.PERMANENT:
                logger.error(
                    "Permanent provider failure for %s to %s (request=%s): %s",
                    request.kind, mask_phone(phone.e164), request.request_id, result.error,
                )
                return attempt

            if call == policy.max_attempts:
                logger.error(
                    "Giving up on %s to %s after %d attempt(s) (request=%s): %s",
                    request.kind, mask_phone(phone.e164), call, request.request_id, result.error,
                )
                return attempt

            delay = policy.backoff_for(call)
            if waited + delay > policy.max_total_wait_seconds:
                logger.error(
                    "Retry wait budget of %.1fs exhausted for %s (request=%s): %s",
                    policy.max_total_wait_seconds, request.kind, request.request_id, result.error,
                )
                return attempt

            if deadline is not None and self._clock() + delay > deadline:
                return self._skip(request, phone.e164, message,
                                  Cancelled(f"Deadline expires before retry {call}"))

            logger.info(
                "Transient provider failure for %s (request=%s, attempt=%d), retrying in %.2fs: %s",
                request.kind, request.request_id, call, delay, result.error,
            )
            if self._wait(delay, cancel):
                return self._skip(request, phone.e164, message,
                                  Cancelled(f"Cancelled while waiting for retry {call}"))
            waited += delay

        # max_attempts >= 1, so the loop always returns
        raise AssertionError("unreachable")

    # --- Internals ---

    def _call_provider(self, phone: PhoneNumber, message: RenderedMessage) -> ProviderResult:
        try:
            result = self._provider.send(phone.e164, message.text)
        except Exception as exc:
            logger.debug("Provider raised %s", type(exc).__name__, exc_info=True)
            return classify_exception(exc)
        if not isinstance(result, ProviderResult):
            return ProviderResult.permanent(f"Provider returned {type(result).__name__}")
        return result

    def _wait(self, delay: float, cancel: threading.Event | None) -> bool:
        """Block for the backoff delay; True if cancelled meanwhile."""
        if cancel is not None:
            return cancel.wait(delay)
        self._sleep(delay)
        return False

    def _skip(
        self,
        request: NotificationRequest,
        destination: str | None,
        message: RenderedMessage | None,
        error: NotificationError,
    ) -> DeliveryAttempt:
        logger.warning(
            "Skipped %s to %s (request=%s): %s",
            request.kind, mask_phone(destination), request.request_id, error,
        )
        return self._record(
            request, destination, DeliveryOutcome.SKIPPED,
            message=message, error_code=error.code, error_detail=str(error),
        )

    def _record(
        self,
        request: NotificationRequest,
        destination: str | None,
        outcome: DeliveryOutcome,
        *,
        message: RenderedMessage | None = None,
        error_code: str | None = None,
        error_detail: str | None = None,
        message_id: str | None = None,
    ) -> DeliveryAttempt:
        def build(number: int) -> DeliveryAttempt:
            return DeliveryAttempt(
                request_id=request.request_id,
                kind=request.kind,
                destination=destination,
                attempt_number=number,
                outcome=outcome,
                error_code=error_code,
                error_detail=error_detail,
                message_id=message_id,
                text=message.text if message is not None else None,
            )

        return self._store.append_next(request.request_id, build)


__all__ = ["RetryPolicy", "DispatchConfig", "DeliveryDispatcher"]
