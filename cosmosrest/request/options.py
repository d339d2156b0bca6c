"""
Call options.

A call option is a function applied to a ResourceRequest after the default
headers are set. Options only touch headers and the request context slot,
never the body. All options overwrite their header (set semantics) except
``query_version``, which appends (add semantics).

Usage:
    client.query(link, sql, opts=[limit(100), continuation(token)])
"""

import json
from enum import Enum
from typing import Any, Callable, Union

from cosmosrest.exceptions import ParseError
from cosmosrest.request.headers import (
    HEADER_AIM,
    HEADER_CONSISTENCY_LEVEL,
    HEADER_CONTINUATION,
    HEADER_CROSS_PARTITION,
    HEADER_ENABLE_SCAN,
    HEADER_IF_MATCH,
    HEADER_IF_MODIFIED_SINCE,
    HEADER_IF_NONE_MATCH,
    HEADER_MAX_ITEM_COUNT,
    HEADER_OFFER_THROUGHPUT,
    HEADER_PARALLELIZE_CROSS_PARTITION,
    HEADER_PARTITION_KEY,
    HEADER_PARTITION_KEY_RANGE_ID,
    HEADER_POPULATE_QUERY_METRICS,
    HEADER_QUERY_VERSION,
    HEADER_SESSION_TOKEN,
    HEADER_UPSERT,
    SUPPORTED_QUERY_VERSION,
)

# Callable[[ResourceRequest], None]; raises to abort the request
CallOption = Callable[[Any], None]


class Consistency(str, Enum):
    """Consistency levels, strongest to weakest."""
    STRONG = "Strong"
    BOUNDED = "Bounded"
    SESSION = "Session"
    EVENTUAL = "Eventual"


def _encode_partition_key(value: Any) -> str:
    """
    Encode a partition key value as the JSON array the service expects.

    Values that know how to encode themselves (pydantic models, objects with
    ``to_json``) are used as-is.
    """
    if hasattr(value, "model_dump_json"):
        return value.model_dump_json()
    if callable(getattr(value, "to_json", None)):
        return value.to_json()
    return json.dumps([value], separators=(",", ":"))


def partition_key(value: Any) -> CallOption:
    """
    Specify the partition the request targets.

    The header must be a JSON array holding one value, e.g. ``["abc"]``.
    Encoding errors surface when the option is applied.
    """
    try:
        header = _encode_partition_key(value)
        error = None
    except (TypeError, ValueError) as e:
        header = ""
        error = e

    def apply(request: Any) -> None:
        if error is not None:
            raise ParseError(f"Cannot encode partition key {value!r}: {error}")
        request.headers.set(HEADER_PARTITION_KEY, header)

    return apply


def upsert() -> CallOption:
    """Create the document if it does not exist, replace it otherwise."""
    def apply(request: Any) -> None:
        request.headers.set(HEADER_UPSERT, "true")
    return apply


def limit(max_items: int) -> CallOption:
    """Set the max item count per page."""
    header = str(max_items)

    def apply(request: Any) -> None:
        request.headers.set(HEADER_MAX_ITEM_COUNT, header)
    return apply


def continuation(token: str) -> CallOption:
    """Resume a paged read or query. An empty token is ignored."""
    def apply(request: Any) -> None:
        if not token:
            return
        request.headers.set(HEADER_CONTINUATION, token)
    return apply


def consistency_level(level: Union[Consistency, str]) -> CallOption:
    """Override the consistency level; must be the same as or weaker than the account's."""
    value = level.value if isinstance(level, Consistency) else str(level)

    def apply(request: Any) -> None:
        request.headers.set(HEADER_CONSISTENCY_LEVEL, value)
    return apply


def session_token(token: str) -> CallOption:
    def apply(request: Any) -> None:
        request.headers.set(HEADER_SESSION_TOKEN, token)
    return apply


def cross_partition() -> CallOption:
    """Allow the query to run on all partitions."""
    def apply(request: Any) -> None:
        request.headers.set(HEADER_CROSS_PARTITION, "true")
    return apply


def if_match(etag: str) -> CallOption:
    """Optimistic concurrency on PUT and DELETE."""
    def apply(request: Any) -> None:
        request.headers.set(HEADER_IF_MATCH, etag)
    return apply


def if_none_match(etag: str) -> CallOption:
    """Only execute a GET if the resource has changed."""
    def apply(request: Any) -> None:
        request.headers.set(HEADER_IF_NONE_MATCH, etag)
    return apply


def if_modified_since(date: str) -> CallOption:
    """Only return the resource if modified after an RFC 1123 date."""
    def apply(request: Any) -> None:
        request.headers.set(HEADER_IF_MODIFIED_SINCE, date)
    return apply


def change_feed() -> CallOption:
    def apply(request: Any) -> None:
        request.headers.set(HEADER_AIM, "Incremental feed")
    return apply


def throughput_rus(rus: int) -> CallOption:
    """Provision throughput when creating a collection."""
    header = str(rus)

    def apply(request: Any) -> None:
        request.headers.set(HEADER_OFFER_THROUGHPUT, header)
    return apply


def partition_key_range_id(range_id: int) -> CallOption:
    header = str(range_id)

    def apply(request: Any) -> None:
        request.headers.set(HEADER_PARTITION_KEY_RANGE_ID, header)
    return apply


def enable_query_scan() -> CallOption:
    def apply(request: Any) -> None:
        request.headers.set(HEADER_ENABLE_SCAN, "true")
    return apply


def enable_parallelize_cross_partition_query() -> CallOption:
    def apply(request: Any) -> None:
        request.headers.set(HEADER_PARALLELIZE_CROSS_PARTITION, "true")
    return apply


def enable_populate_query_metrics() -> CallOption:
    def apply(request: Any) -> None:
        request.headers.set(HEADER_POPULATE_QUERY_METRICS, "true")
    return apply


def query_version() -> CallOption:
    """Append the query version header. Repeated use accumulates values."""
    def apply(request: Any) -> None:
        request.headers.add(HEADER_QUERY_VERSION, SUPPORTED_QUERY_VERSION)
    return apply


def with_context(context: Any) -> CallOption:
    """Attach a RequestContext used to cancel the request or bound its duration."""
    def apply(request: Any) -> None:
        request.context = context
    return apply
