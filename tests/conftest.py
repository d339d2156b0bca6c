"""Shared fixtures for cosmosrest tests."""

import base64
import logging
from typing import Callable, List, Union

import httpx
import pytest

from cosmosrest.core.config_manager import CosmosConfig
from cosmosrest.core.logging_config import SensitiveDataFilter

MASTER_KEY = base64.b64encode(b"cosmosrest-test-master-key-0123456789").decode()
ENDPOINT = "https://testaccount.documents.azure.com"

Scripted = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


class ScriptedTransport(httpx.MockTransport):
    """
    Mock transport replaying a fixed list of outcomes.

    Each outcome is a response, an exception to raise, or a handler. The last
    outcome repeats once the script runs out. Every request is recorded.
    """

    def __init__(self, *outcomes: Scripted):
        self.outcomes = list(outcomes)
        self.requests: List[httpx.Request] = []
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self.outcomes)) - 1
        outcome = self.outcomes[index]
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, httpx.Response):
            # fresh copy, a response object is consumed once
            return httpx.Response(outcome.status_code, headers=outcome.headers, content=outcome.content)
        return outcome(request)

    @property
    def calls(self) -> int:
        return len(self.requests)


@pytest.fixture
def master_key():
    """Base64 master key accepted by the signer."""
    return MASTER_KEY


@pytest.fixture
def config():
    """Client configuration with fast retries."""
    return CosmosConfig(
        endpoint=ENDPOINT,
        master_key=MASTER_KEY,
        retry_wait_min=0.001,
        retry_wait_max=0.002,
        retry_max_attempts=3,
    )


@pytest.fixture
def scripted():
    """Factory for ScriptedTransport."""
    return ScriptedTransport


@pytest.fixture
def restore_root_logger():
    """Undo setup_logging changes to the root logger."""
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in root.handlers[:]:
        if any(isinstance(f, SensitiveDataFilter) for f in handler.filters):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
