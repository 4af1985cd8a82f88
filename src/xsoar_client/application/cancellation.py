"""Cooperative cancellation for long-running operations.

A ``CancellationToken`` is polled by value: the pagination engine asks
``raise_if_cancelled()`` between items and before every page fetch, and the
service bounds an in-flight request by ``remaining()`` when a deadline is set.
"""

from __future__ import annotations

import time
from typing import Optional

from xsoar_client.domain.exceptions import (
    CancellationError,
    DeadlineExceededError,
    OperationCancelledError,
)


class CancellationToken:
    """Explicit cancel flag plus an optional monotonic deadline."""

    def __init__(self, deadline: Optional[float] = None) -> None:
        self._deadline = deadline
        self._cancelled = False

    @classmethod
    def with_timeout(cls, seconds: float) -> CancellationToken:
        return cls(deadline=time.monotonic() + seconds)

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self.error() is not None

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or ``None`` without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def error(self) -> Optional[CancellationError]:
        if self._cancelled:
            return OperationCancelledError()
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return DeadlineExceededError()
        return None

    def raise_if_cancelled(self) -> None:
        err = self.error()
        if err is not None:
            raise err
