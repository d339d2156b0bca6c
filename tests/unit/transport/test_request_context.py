"""Tests for RequestContext."""

import threading
import time

from cosmosrest.exceptions import ContextDoneError, DeadlineExceededError, RequestCanceledError
from cosmosrest.transport.context import RequestContext


class TestRequestContext:
    """Test cancellation and deadlines."""

    def test_fresh_context_is_live(self):
        context = RequestContext()

        assert not context.done()
        assert context.error() is None
        assert context.remaining() is None
        assert context.deadline is None

    def test_cancel(self):
        context = RequestContext()
        context.cancel()

        assert context.done()
        error = context.error()
        assert isinstance(error, RequestCanceledError)
        assert isinstance(error, ContextDoneError)
        assert str(error) == "context canceled"

    def test_deadline(self):
        context = RequestContext(timeout=0.01)
        time.sleep(0.02)

        assert context.done()
        assert context.remaining() == 0.0
        error = context.error()
        assert isinstance(error, DeadlineExceededError)
        assert str(error) == "context deadline exceeded"

    def test_cancel_after_deadline_keeps_deadline_error(self):
        context = RequestContext(timeout=0.0)
        assert context.done()
        context.cancel()
        assert isinstance(context.error(), DeadlineExceededError)

    def test_wait_returns_early_on_cancel(self):
        context = RequestContext()
        threading.Timer(0.02, context.cancel).start()

        start = time.monotonic()
        finished = context.wait(5.0)

        assert finished
        assert time.monotonic() - start < 1.0

    def test_wait_full_duration_when_live(self):
        context = RequestContext()
        assert context.wait(0.01) is False

    def test_wait_stops_at_deadline(self):
        context = RequestContext(timeout=0.02)

        start = time.monotonic()
        finished = context.wait(5.0)

        assert finished
        assert time.monotonic() - start < 1.0
        assert isinstance(context.error(), DeadlineExceededError)

    def test_wait_marks_done_once_deadline_elapses(self):
        context = RequestContext(timeout=0.01)

        assert context.wait(1.0) is True
        assert context._event.is_set()
        assert context.done()
        assert isinstance(context.error(), DeadlineExceededError)

    def test_wait_on_expired_context_returns_immediately(self):
        context = RequestContext(timeout=0)

        start = time.monotonic()
        assert context.wait(5.0) is True
        assert time.monotonic() - start < 0.5
