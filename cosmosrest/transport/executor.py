"""
Transport executor.

Sends a signed ResourceRequest through a shared httpx client, retrying
transport failures and 5xx responses with exponential backoff, honoring the
request's cancellation context, and decoding the response into the caller's
target type.

Author: cosmosrest contributors
"""

import functools
import logging
import time
from typing import Any, Callable, Optional, Union

import httpx
from pydantic import TypeAdapter, ValidationError

from cosmosrest.core.logging_config import log_with_context
from cosmosrest.exceptions import (
    ParseError,
    RequestError,
    RetriesExhaustedError,
)
from cosmosrest.request.request import ResourceRequest
from cosmosrest.response import Response, expect_status_code
from cosmosrest.transport.retry import RetryPolicy

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0  # seconds
POOL_MAX_CONNECTIONS = 100
POOL_MAX_KEEPALIVE = 100
MIN_ATTEMPT_TIMEOUT = 0.001  # seconds


@functools.lru_cache(maxsize=None)
def _adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


def create_http_client(
    pooled: bool = False,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.BaseTransport] = None
) -> httpx.Client:
    """
    Build the httpx client shared by every request of a Client.

    Args:
        pooled: Keep connections alive and reuse them across requests
        timeout: Default per-request timeout in seconds
        transport: Custom transport (e.g. ``httpx.MockTransport`` in tests)

    Returns:
        Configured httpx client
    """
    if pooled:
        limits = httpx.Limits(
            max_connections=POOL_MAX_CONNECTIONS,
            max_keepalive_connections=POOL_MAX_KEEPALIVE,
        )
    else:
        limits = httpx.Limits(max_keepalive_connections=0)

    kwargs = {"timeout": timeout, "limits": limits}
    if transport is not None:
        kwargs["transport"] = transport
    return httpx.Client(**kwargs)


class Executor:
    """
    Retrying request executor.

    Attributes:
        http_client: Shared httpx client
        policy: Retry policy
        debug: Log every request and its curl equivalent
        verbose: With debug, also log response headers and content
    """

    def __init__(
        self,
        http_client: httpx.Client,
        policy: Optional[RetryPolicy] = None,
        debug: bool = False,
        verbose: bool = False
    ):
        self.http_client = http_client
        self.policy = policy or RetryPolicy()
        self.debug = debug
        self.verbose = verbose

    def execute(
        self,
        request: ResourceRequest,
        expected_status: Union[int, Callable[[int], bool]],
        target: Any = None
    ) -> Response:
        """
        Send a request and decode the response.

        Args:
            request: Signed request with options applied
            expected_status: Status code, or a validator, that means success
            target: Type to decode the JSON body into; None skips decoding

        Returns:
            Response wrapping the headers and the decoded body

        Raises:
            RequestCanceledError: If the context was canceled
            DeadlineExceededError: If the context deadline passed
            RetriesExhaustedError: If every attempt failed transiently
            RequestError: If the service answered with an unexpected status
            ParseError: If the body does not decode into ``target``
        """
        is_expected = (
            expected_status if callable(expected_status)
            else expect_status_code(expected_status)
        )

        if self.debug:
            log_with_context(
                logger, logging.INFO, f"CosmosDB Request: {request.method} {request.url}",
                resource_id=request.resource_id,
                resource_type=request.resource_type,
            )
            logger.info(f"CURL: {request.to_curl()}")

        response = self._send_with_retry(request)

        if self.debug and self.verbose:
            log_with_context(
                logger, logging.INFO, f"CosmosDB Response: {response.status_code}",
                headers=dict(response.headers),
                content_length=len(response.content),
            )

        if not is_expected(response.status_code):
            raise self._decode_error(request, response)

        data = None
        if target is not None:
            data = self._decode_body(response, target)
            if self.debug and self.verbose:
                logger.info(f"CosmosDB Response Content: {response.text}")

        return Response(response.headers, status_code=response.status_code, data=data)

    def _send_with_retry(self, request: ResourceRequest) -> httpx.Response:
        """Run the attempt loop; returns the first non-retryable response."""
        context = request.context
        last_error = ""

        for attempt in range(1, self.policy.max_attempts + 1):
            self._check_context(request)

            try:
                response = self.http_client.send(request.to_httpx(self._attempt_timeout(context)))
            except httpx.TransportError as e:
                self._check_context(request)
                last_error = str(e) or e.__class__.__name__
                logger.warning(
                    f"{request.method} {request.url} request failed "
                    f"(attempt {attempt}/{self.policy.max_attempts}): {last_error}"
                )
            else:
                if context is not None and context.done():
                    # canceled or timed out while the exchange was in flight
                    response.close()
                    self._check_context(request)
                if not self.policy.is_retryable_status(response.status_code):
                    return response
                response.read()
                response.close()
                last_error = f"unexpected status {response.status_code}"
                logger.warning(
                    f"{request.method} {request.url} returned {response.status_code} "
                    f"(attempt {attempt}/{self.policy.max_attempts})"
                )

            if attempt < self.policy.max_attempts:
                self._sleep(request, self.policy.backoff(attempt))

        raise RetriesExhaustedError(
            self.policy.max_attempts,
            method=request.method,
            url=request.url,
            last_error=last_error,
            resource_id=request.resource_id,
            resource_type=request.resource_type,
            request=request,
        )

    def _attempt_timeout(self, context: Any) -> httpx.Timeout:
        """Cap the attempt timeout at the time left on the context."""
        timeout = self.http_client.timeout
        if context is None:
            return timeout
        remaining = context.remaining()
        if remaining is None:
            return timeout
        if timeout.read is not None:
            remaining = min(remaining, timeout.read)
        return httpx.Timeout(max(remaining, MIN_ATTEMPT_TIMEOUT))

    def _sleep(self, request: ResourceRequest, seconds: float) -> None:
        context = request.context
        if context is None:
            time.sleep(seconds)
            return
        if context.wait(seconds):
            self._check_context(request)

    def _check_context(self, request: ResourceRequest) -> None:
        """Raise the context's error if it is done."""
        context = request.context
        if context is None:
            return
        error = context.error()
        if error is not None:
            error.resource_id = request.resource_id
            error.resource_type = request.resource_type
            error.request = request
            error.details.update(
                resource_id=request.resource_id,
                resource_type=request.resource_type,
            )
            raise error

    def _decode_error(self, request: ResourceRequest, response: httpx.Response) -> RequestError:
        code, message = "", ""
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            code = str(payload.get("code", ""))
            message = str(payload.get("message", ""))
        if not message:
            message = response.text or response.reason_phrase

        logger.debug(
            f"{request.method} {request.url} failed with {response.status_code}: {code}"
        )
        return RequestError(
            code,
            message,
            response.status_code,
            resource_id=request.resource_id,
            resource_type=request.resource_type,
            request=request,
        )

    def _decode_body(self, response: httpx.Response, target: Any) -> Any:
        try:
            return _adapter(target).validate_json(response.content)
        except ValidationError as e:
            raise ParseError(
                f"error decoding response body: {e}",
                details={"status_code": response.status_code},
            ) from e

