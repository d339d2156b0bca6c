"""
Cosmos DB REST header names and a small header multimap.

Reference: https://docs.microsoft.com/en-us/rest/api/cosmos-db/common-cosmosdb-rest-request-headers
"""

from typing import Dict, Iterator, List, Optional, Tuple

# REST API version sent with every request
SUPPORTED_VERSION = "2018-12-31"

# API version used to query collections created without a partition key
NO_PARTITION_VERSION = "2017-02-22"

# Value of the query version header
SUPPORTED_QUERY_VERSION = "1.0"

USER_AGENT = "cosmosrest/0.1.0"

# Indicates a change feed request. Must be set to "Incremental feed".
HEADER_AIM = "A-IM"

HEADER_AUTH = "Authorization"

# Consistency level override: Strong, Bounded, Session or Eventual
HEADER_CONSISTENCY_LEVEL = "X-Ms-Consistency-Level"

HEADER_CONTENT_LENGTH = "Content-Length"

# application/query+json for queries, application/json otherwise
HEADER_CONTENT_TYPE = "Content-Type"

# Token returned for queries and read-feed operations when more results exist
HEADER_CONTINUATION = "X-Ms-Continuation"

# Fan the query out across partitions when no partition key is given
HEADER_CROSS_PARTITION = "X-Ms-Documentdb-Query-Enablecrosspartition"

# Use an index scan when the right index path is not available
HEADER_ENABLE_SCAN = "X-Ms-Documentdb-Query-Enable-Scan"

HEADER_IF_MATCH = "If-Match"

# Ignored when If-None-Match is specified
HEADER_IF_MODIFIED_SINCE = "If-Modified-Since"

HEADER_IF_NONE_MATCH = "If-None-Match"

HEADER_IS_QUERY = "X-Ms-Documentdb-Isquery"

# -1 lets the service pick the page size
HEADER_MAX_ITEM_COUNT = "X-Ms-Max-Item-Count"

# Throughput in units of 100 request units per second
HEADER_OFFER_THROUGHPUT = "X-Ms-Offer-Throughput"

HEADER_PARALLELIZE_CROSS_PARTITION = "X-Ms-Documentdb-Query-Parallelizecrosspartitionquery"

# JSON array holding the single partition key value, e.g. ["abc"]
HEADER_PARTITION_KEY = "X-Ms-Documentdb-Partitionkey"

HEADER_PARTITION_KEY_RANGE_ID = "X-Ms-Documentdb-Partitionkeyrangeid"

HEADER_POPULATE_QUERY_METRICS = "X-Ms-Documentdb-Populatequerymetrics"

# Semicolon delimited query execution statistics
HEADER_QUERY_METRICS = "X-Ms-Documentdb-Query-Metrics"

HEADER_QUERY_VERSION = "X-Ms-Cosmos-Query-Version"

# Request units consumed by the operation
HEADER_REQUEST_CHARGE = "X-Ms-Request-Charge"

HEADER_SESSION_TOKEN = "X-Ms-Session-Token"

HEADER_UPSERT = "X-Ms-Documentdb-Is-Upsert"

HEADER_USER_AGENT = "User-Agent"

HEADER_VERSION = "X-Ms-Version"

# RFC 1123 date in UTC, e.g. Fri, 08 Apr 2015 03:52:31 GMT
HEADER_X_DATE = "X-Ms-Date"


def canonical_header_key(key: str) -> str:
    """Canonicalize a header name (``x-ms-date`` -> ``X-Ms-Date``)."""
    return "-".join(part.capitalize() for part in key.strip().split("-"))


class RequestHeaders:
    """
    Case-insensitive header multimap.

    ``set`` replaces every value stored under a name, ``add`` appends one.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, List[str]] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def set(self, key: str, value: str) -> None:
        self._values[canonical_header_key(key)] = [value]

    def add(self, key: str, value: str) -> None:
        self._values.setdefault(canonical_header_key(key), []).append(value)

    def get(self, key: str, default: str = "") -> str:
        """Return the first value stored under ``key``."""
        values = self._values.get(canonical_header_key(key))
        return values[0] if values else default

    def get_list(self, key: str) -> List[str]:
        return list(self._values.get(canonical_header_key(key), []))

    def delete(self, key: str) -> None:
        self._values.pop(canonical_header_key(key), None)

    def items(self) -> List[Tuple[str, str]]:
        """Flatten to (name, value) pairs, one per stored value."""
        return [(key, value) for key, values in self._values.items() for value in values]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and canonical_header_key(key) in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"RequestHeaders({self._values!r})"
