"""Immutable data models shared by the composer, dispatcher and store."""

from __future__ import annotations

import time
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from smsdispatch.common.constants import DeliveryOutcome, NotificationKind


def _new_request_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class NotificationRequest:
    """A request to notify one destination about one event."""

    kind: NotificationKind
    destination: str | None
    parameters: Mapping[str, Any] = field(default_factory=dict)
    request_id: str = field(default_factory=_new_request_id)
    created_at: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        # Coerce raw strings and freeze a private copy of the parameters
        object.__setattr__(self, "kind", NotificationKind(self.kind))
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))


@dataclass(frozen=True)
class RenderedMessage:
    """Final message text for a notification kind."""

    kind: NotificationKind
    text: str

    @property
    def length(self) -> int:
        return len(self.text)


@dataclass(frozen=True)
class DeliveryAttempt:
    """One recorded step in delivering a request. Never mutated after creation."""

    request_id: str
    kind: NotificationKind
    destination: str | None
    attempt_number: int
    outcome: DeliveryOutcome
    timestamp: float = field(default_factory=time.time)
    error_code: str | None = None
    error_detail: str | None = None
    message_id: str | None = None
    text: str | None = None

    @property
    def is_sent(self) -> bool:
        return self.outcome == DeliveryOutcome.SENT

    @property
    def is_failed(self) -> bool:
        return self.outcome == DeliveryOutcome.FAILED

    @property
    def is_skipped(self) -> bool:
        return self.outcome == DeliveryOutcome.SKIPPED

    @property
    def is_cancelled(self) -> bool:
        return self.is_skipped and self.error_code == "cancelled"


__all__ = ["NotificationRequest", "RenderedMessage", "DeliveryAttempt"]
