"""Append-only delivery status store.

Records every attempt the dispatcher makes, keyed by request id. Callers
can read history but never mutate or remove it.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from smsdispatch.common.models import DeliveryAttempt


class DeliveryStatusStore:
    """Thread-safe, in-memory, append-only attempt log."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._attempts: list[DeliveryAttempt] = []
        self._by_request: dict[str, list[DeliveryAttempt]] = defaultdict(list)

    def append(self, attempt: DeliveryAttempt) -> None:
        """Record an attempt."""
        with self._lock:
            self._by_request[attempt.request_id].append(attempt)
            self._attempts.append(attempt)

    def append_next(
        self, request_id: str, build: Callable[[int], DeliveryAttempt],
    ) -> DeliveryAttempt:
        """Build the request's next attempt and record it in one step.

        ``build`` receives the next 1-based attempt number and is called with
        the store lock held, so concurrent writers never share a number.
        """
        with self._lock:
            history = self._by_request[request_id]
            number = history[-1].attempt_number + 1 if history else 1
            attempt = build(number)
            if attempt.request_id != request_id:
                raise ValueError(
                    f"Built attempt for {attempt.request_id}, expected {request_id}"
                )
            history.append(attempt)
            self._attempts.append(attempt)
            return attempt

    def lookup(self, request_id: str) -> tuple[DeliveryAttempt, ...]:
        """All attempts for a request, ordered by attempt number."""
        with self._lock:
            return tuple(self._by_request.get(request_id, ()))

    def latest(self, request_id: str) -> DeliveryAttempt | None:
        with self._lock:
            history = self._by_request.get(request_id)
            return history[-1] if history else None

    def next_attempt_number(self, request_id: str) -> int:
        with self._lock:
            history = self._by_request.get(request_id)
            return history[-1].attempt_number + 1 if history else 1

    def all_attempts(self) -> list[DeliveryAttempt]:
        with self._lock:
            return list(self._attempts)

    def __len__(self) -> int:
        with self._lock:
            return len(self._attempts)

    def get_stats(self) -> dict[str, Any]:
        """Counts by outcome and kind across everything recorded."""
        with self._lock:
            attempts = list(self._attempts)
            requests = len(self._by_request)

        by_outcome: dict[str, int] = {}
        by_kind: dict[str, int] = {}
        for a in attempts:
            by_outcome[a.outcome] = by_outcome.get(a.outcome, 0) + 1
            by_kind[a.kind] = by_kind.get(a.kind, 0) + 1

        return {
            "total_attempts": len(attempts),
            "requests": requests,
            "by_outcome": by_outcome,
            "by_kind": by_kind,
        }


__all__ = ["DeliveryStatusStore"]
