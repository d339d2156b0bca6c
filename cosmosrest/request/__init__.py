"""Request construction: link parsing, headers, signing and call options."""

from cosmosrest.request.headers import RequestHeaders
from cosmosrest.request.links import ResourceLink, is_self_link, parse_link
from cosmosrest.request.options import (
    CallOption,
    Consistency,
    change_feed,
    consistency_level,
    continuation,
    cross_partition,
    enable_parallelize_cross_partition_query,
    enable_populate_query_metrics,
    enable_query_scan,
    if_match,
    if_modified_since,
    if_none_match,
    limit,
    partition_key,
    partition_key_range_id,
    query_version,
    session_token,
    throughput_rus,
    upsert,
    with_context,
)
from cosmosrest.request.request import ResourceRequest, apply_options

__all__ = [
    "RequestHeaders",
    "ResourceLink",
    "is_self_link",
    "parse_link",
    "ResourceRequest",
    "apply_options",
    # Options
    "CallOption",
    "Consistency",
    "change_feed",
    "consistency_level",
    "continuation",
    "cross_partition",
    "enable_parallelize_cross_partition_query",
    "enable_populate_query_metrics",
    "enable_query_scan",
    "if_match",
    "if_modified_since",
    "if_none_match",
    "limit",
    "partition_key",
    "partition_key_range_id",
    "query_version",
    "session_token",
    "throughput_rus",
    "upsert",
    "with_context",
]
