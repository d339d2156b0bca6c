"""
Request contexts.

A RequestContext lets a caller cancel an in-progress request or bound how
long it may run, including the time spent sleeping between retries.

Usage:
    ctx = RequestContext(timeout=2.5)
    db.execute_stored_procedure(link, params, opts=[with_context(ctx)])

    ctx = RequestContext()
    threading.Timer(0.5, ctx.cancel).start()
"""

import threading
import time
from typing import Optional

from cosmosrest.exceptions import (
    ContextDoneError,
    DeadlineExceededError,
    RequestCanceledError,
)


class RequestContext:
    """
    Cancellation signal with an optional deadline.

    Safe to cancel from another thread. Once done, a context stays done.
    """

    def __init__(self, timeout: Optional[float] = None):
        """
        Initialize request context.

        Args:
            timeout: Seconds from now until the deadline, or None for no deadline
        """
        self._event = threading.Event()
        self._canceled = False
        self._deadline: Optional[float] = None
        if timeout is not None:
            self._deadline = time.monotonic() + timeout

    @property
    def deadline(self) -> Optional[float]:
        """Deadline on the ``time.monotonic`` clock."""
        return self._deadline

    def cancel(self) -> None:
        if not self._event.is_set():
            self._canceled = True
            self._event.set()

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def done(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._event.set()
            return True
        return False

    def error(self) -> Optional[ContextDoneError]:
        """Return the reason the context is done, or None while it is live."""
        if not self.done():
            return None
        if self._canceled:
            return RequestCanceledError()
        return DeadlineExceededError()

    def wait(self, seconds: float) -> bool:
        """
        Sleep up to ``seconds``, waking early when the context is done.

        Returns:
            True if the context finished during (or before) the wait
        """
        remaining = self.remaining()
        if remaining is not None and remaining <= seconds:
            if not self._event.wait(remaining):
                # the deadline has elapsed even if the clock reads a hair short
                self._event.set()
            return True
        self._event.wait(seconds)
        return self.done()

    def __repr__(self) -> str:
        state = "done" if self.done() else "active"
        return f"RequestContext(state={state}, remaining={self.remaining()})"
