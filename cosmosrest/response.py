"""
Responses returned by the executor.

Wraps the raw response headers and exposes the tokens and metrics the
service reports: continuation, session token, request charge and query
execution metrics.
"""

import logging
from typing import Any, Callable, Mapping, Optional, Union

import httpx

from cosmosrest.exceptions import NoMetricsError, ParseError
from cosmosrest.models import METRIC_FIELDS, Metrics, metric_value
from cosmosrest.request.headers import (
    HEADER_CONTINUATION,
    HEADER_QUERY_METRICS,
    HEADER_REQUEST_CHARGE,
    HEADER_SESSION_TOKEN,
)

logger = logging.getLogger(__name__)

StatusValidator = Callable[[int], bool]


class Response:
    """
    Headers (and optionally the decoded body) of a successful response.

    Attributes:
        headers: Raw response headers
        status_code: HTTP status code
        data: Body decoded into the caller's target type, None when not requested
    """

    def __init__(
        self,
        headers: Union[httpx.Headers, Mapping[str, str], None] = None,
        status_code: int = 0,
        data: Any = None
    ):
        self.headers = headers if isinstance(headers, httpx.Headers) else httpx.Headers(headers or {})
        self.status_code = status_code
        self.data = data

    def continuation(self) -> str:
        """
        Continuation token for paged requests.

        Pass this value to the next request to get the next page; empty when
        there are no more pages.
        """
        return self.headers.get(HEADER_CONTINUATION, "")

    def session_token(self) -> str:
        """Session token to pass on for session consistent reads."""
        return self.headers.get(HEADER_SESSION_TOKEN, "")

    def request_charge(self) -> float:
        """
        Request units consumed by the operation.

        Raises:
            ParseError: If the header is missing or not numeric
        """
        raw = self.headers.get(HEADER_REQUEST_CHARGE, "")
        try:
            return float(raw)
        except ValueError as e:
            raise ParseError(f"error parsing request charge header: {raw!r}") from e

    def query_metrics(self) -> Metrics:
        """
        Decode the query metrics header.

        Raises:
            NoMetricsError: If the response carries no metrics
            ParseError: If the metrics or charge headers are malformed
        """
        return decode_metrics(
            self.headers.get(HEADER_QUERY_METRICS, ""),
            self.headers.get(HEADER_REQUEST_CHARGE),
        )

    def __repr__(self) -> str:
        return f"Response(status_code={self.status_code}, continuation={self.continuation()!r})"


def decode_metrics(metrics_header: str, charge_header: Optional[str] = None) -> Metrics:
    """
    Parse a query metrics header into a Metrics record.

    Example header:
        totalExecutionTimeInMs=33.67;queryCompileTimeInMs=0.06;retrievedDocumentCount=2000

    Every value is parsed as a float; integer fields are floored. Unknown
    keys are ignored, entries that are not ``key=value`` are skipped.

    Args:
        metrics_header: Value of the query metrics header
        charge_header: Value of the request charge header, if present

    Returns:
        Decoded metrics

    Raises:
        NoMetricsError: If ``metrics_header`` is empty
        ParseError: If a value or the charge is not numeric
    """
    if not metrics_header:
        raise NoMetricsError()

    values = {}
    for entry in metrics_header.split(";"):
        pair = entry.split("=")
        if len(pair) != 2:
            continue
        key, raw = pair[0].strip(), pair[1].strip()
        try:
            value = float(raw)
        except ValueError as e:
            raise ParseError(f"error parsing metrics header: {entry!r}") from e

        field = METRIC_FIELDS.get(key)
        if field is None:
            logger.debug(f"Ignoring unknown query metric: {key}")
            continue
        values[field] = metric_value(field, value)

    if charge_header:
        try:
            values["request_charge"] = float(charge_header)
        except ValueError as e:
            raise ParseError(f"error parsing request charge header: {charge_header!r}") from e

    return Metrics(**values)


def expect_status_code(expected: int) -> StatusValidator:
    """Validator accepting exactly ``expected``."""
    def validate(status_code: int) -> bool:
        return status_code == expected
    return validate


def expect_status_class(expected: int) -> StatusValidator:
    """Validator accepting any status in the same hundred as ``expected`` (e.g. 4xx)."""
    beginning = (expected // 100) * 100
    end = beginning + 99

    def validate(status_code: int) -> bool:
        return beginning <= status_code <= end
    return validate
