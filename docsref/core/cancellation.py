"""
Cooperative cancellation for long-running queries
"""

import threading
import time
from typing import Optional


class QueryCancelledError(Exception):
    """Raised inside a query when its token has been cancelled or has expired"""


class CancellationToken:
    """
    Thread-safe cancellation flag with an optional deadline.

    Queries call ``raise_if_cancelled()`` between units of work (one document or
    one path), so cancellation latency is bounded by the cost of a single unit.
    """

    def __init__(self, timeout: Optional[float] = None):
        """
        Args:
            timeout: Seconds from now after which the token counts as cancelled
        """
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._reason = "cancelled"

    def cancel(self, reason: str = "cancelled") -> None:
        self._reason = reason
        self._event.set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self.expired

    @property
    def reason(self) -> str:
        if not self._event.is_set() and self.expired:
            return "deadline exceeded"
        return self._reason

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise QueryCancelledError(self.reason)
