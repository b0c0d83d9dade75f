"""SMS provider capability.

Concrete gateway bindings are injected by the surrounding application. A
binding either returns a ProviderResult or raises; raised exceptions are
classified into transient or permanent failures by ``classify_exception``.
"""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol, runtime_checkable

from smsdispatch.common.errors import NotificationError
from smsdispatch.validation.phone import mask_phone

logger = logging.getLogger(__name__)

# Message fragments that mark an unrecognized exception as transient
_TRANSIENT_HINTS = ("timed out", "rate limit", "too many requests")
_HTTP_429 = re.compile(r"\b429\b")


class ProviderStatus(StrEnum):
    """Provider call outcome."""

    OK = "ok"
    TRANSIENT = "transient"
    PERMANENT = "permanent"


@dataclass(frozen=True)
class ProviderResult:
    """Result of a single provider send call."""

    status: ProviderStatus
    message_id: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == ProviderStatus.OK

    @classmethod
    def success(cls, message_id: str | None = None) -> ProviderResult:
        return cls(status=ProviderStatus.OK, message_id=message_id)

    @classmethod
    def transient(cls, error: str) -> ProviderResult:
        return cls(status=ProviderStatus.TRANSIENT, error=error)

    @classmethod
    def permanent(cls, error: str) -> ProviderResult:
        return cls(status=ProviderStatus.PERMANENT, error=error)


@runtime_checkable
class SmsProvider(Protocol):
    """Interface every SMS gateway binding implements."""

    def send(self, phone_number: str, text: str) -> ProviderResult: ...


def classify_exception(exc: BaseException) -> ProviderResult:
    """Map an exception raised by a provider binding to a ProviderResult."""
    if isinstance(exc, NotificationError):
        status = ProviderStatus.TRANSIENT if exc.retryable else ProviderStatus.PERMANENT
        return ProviderResult(status=status, error=str(exc))

    if isinstance(exc, (TimeoutError, ConnectionError)):
        return ProviderResult.transient(f"{type(exc).__name__}: {exc}")

    msg = str(exc).lower()
    if any(hint in msg for hint in _TRANSIENT_HINTS) or _HTTP_429.search(msg):
        return ProviderResult.transient(f"{type(exc).__name__}: {exc}")

    return ProviderResult.permanent(f"{type(exc).__name__}: {exc}")


class LoggingSmsProvider:
    """Development binding: logs the message instead of delivering it."""

    def __init__(self, prefix: str = "log") -> None:
        self._prefix = prefix
        self._sent: list[tuple[str, str]] = []

    def send(self, phone_number: str, text: str) -> ProviderResult:
        message_id = f"{self._prefix}-{uuid.uuid4().hex}"
        self._sent.append((phone_number, text))
        logger.info(
            "SMS to %s (%d chars) logged as %s", mask_phone(phone_number), len(text), message_id,
        )
        return ProviderResult.success(message_id)

    def get_sent(self) -> list[tuple[str, str]]:
        """Messages handed to this provider, oldest first."""
        return list(self._sent)


__all__ = [
    "ProviderStatus",
    "ProviderResult",
    "SmsProvider",
    "classify_exception",
    "LoggingSmsProvider",
]
