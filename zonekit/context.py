#
#
#

"""Cancellable execution context passed through provider operations.

A ``Context`` carries a cancellation flag and an optional deadline. The
HTTP transport checks it before each request and bounds the request
timeout by the remaining deadline. Sequential multi-call operations (the
bulk-replace fallback) check it before every call.
"""

import threading
from time import monotonic
from typing import Optional

from .exceptions import CancelledError


class Context:
    def __init__(self, timeout: Optional[float] = None):
        self._event = threading.Event()
        self._deadline = None if timeout is None else monotonic() + timeout

    @classmethod
    def background(cls) -> 'Context':
        return cls()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and monotonic() >= self._deadline

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - monotonic())

    def check(self) -> None:
        if self.cancelled:
            raise CancelledError()
        if self.expired:
            raise CancelledError('context deadline exceeded')

    def timeout(self, default: Optional[float]) -> Optional[float]:
        """Request timeout honoring both ``default`` and the deadline."""
        remaining = self.remaining()
        if remaining is None:
            return default
        if default is None:
            return remaining
        return min(default, remaining)


def ensure(ctx: Optional[Context]) -> Context:
    return ctx if ctx is not None else Context.background()
