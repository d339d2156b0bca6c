"""Transport: retrying executor, retry policy and request contexts."""

from cosmosrest.transport.context import RequestContext
from cosmosrest.transport.executor import Executor, create_http_client
from cosmosrest.transport.retry import RetryConfig, RetryPolicy

__all__ = [
    "Executor",
    "RequestContext",
    "RetryConfig",
    "RetryPolicy",
    "create_http_client",
]
