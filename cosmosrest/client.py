"""
Cosmos DB REST client primitives.

The Client builds a ResourceRequest for every call, signs it, applies the
caller's options plus the ones derived from configuration (partition key,
cross partition, upsert, If-Match) and hands it to the retrying executor.

Author: cosmosrest contributors
"""

import json
import logging
from typing import Any, List, Mapping, Optional, Protocol, Union, runtime_checkable

import httpx

from cosmosrest.core.config_manager import CosmosConfig
from cosmosrest.exceptions import ParseError, UsageError
from cosmosrest.models import QueryWithParameters
from cosmosrest.request.headers import HEADER_VERSION, NO_PARTITION_VERSION
from cosmosrest.request.options import (
    CallOption,
    cross_partition,
    if_match,
    partition_key,
    upsert,
)
from cosmosrest.request.request import ResourceRequest, apply_options
from cosmosrest.response import Response
from cosmosrest.transport.executor import Executor, create_http_client
from cosmosrest.transport.retry import RetryPolicy
from cosmosrest.utils import join_link, querify, stringify

logger = logging.getLogger(__name__)

Options = Optional[List[Optional[CallOption]]]


@runtime_checkable
class PartitionKeyed(Protocol):
    """A body that knows its own partition key value."""

    def partition_key_value(self) -> Any:
        ...


class Client:
    """
    Low-level Cosmos DB REST client.

    Every method takes the resource link relative to the account endpoint,
    an optional ``target`` type to decode the response body into, and an
    optional list of call options.

    Example:
        client = Client(CosmosConfig(endpoint=url, master_key=key))
        resp = client.read("dbs/db1", target=Database)
        db = resp.data
    """

    def __init__(
        self,
        config: CosmosConfig,
        http_client: Optional[httpx.Client] = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize client.

        Args:
            config: Client configuration
            http_client: Shared httpx client; built from ``config`` when omitted
            transport: Transport for the built httpx client (ignored with ``http_client``)
        """
        self.uri = config.endpoint
        self.config = config
        self._owns_http_client = http_client is None
        self.http_client = http_client or create_http_client(
            pooled=config.pooled,
            timeout=config.timeout,
            transport=transport,
        )
        policy = RetryPolicy.from_settings(
            min_wait=config.retry_wait_min,
            max_wait=config.retry_wait_max,
            max_attempts=config.retry_max_attempts,
        )
        self.executor = Executor(
            self.http_client,
            policy=policy,
            debug=config.debug,
            verbose=config.verbose,
        )

    # ========== Configuration ==========

    def get_uri(self) -> str:
        return self.uri

    def get_config(self) -> CosmosConfig:
        return self.config

    def enable_debug(self) -> None:
        """Log every request, its curl equivalent, and request query metrics."""
        self.config.debug = True
        self.executor.debug = True

    def disable_debug(self) -> None:
        self.config.debug = False
        self.executor.debug = False

    def close(self) -> None:
        """Close the underlying httpx client if this client created it."""
        if self._owns_http_client:
            self.http_client.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ========== Primitives ==========

    def read(self, link: str, target: Any = None, opts: Options = None) -> Response:
        """Read a resource or feed (GET, expects 200)."""
        return self._method("GET", link, 200, target, b"", opts)

    def delete(self, link: str, opts: Options = None) -> Response:
        """Delete a resource (DELETE, expects 204)."""
        return self._method("DELETE", link, 204, None, b"", opts)

    def query(self, link: str, query: str, target: Any = None, opts: Options = None) -> Response:
        """
        Run a SQL query against a feed.

        Args:
            link: Feed link, e.g. ``dbs/db1/colls/c1/docs/``
            query: SQL query text
            target: Type to decode the response body into
            opts: Call options

        Returns:
            Response whose ``data`` holds the decoded page
        """
        return self._query(link, querify(query), target, opts)

    def query_with_parameters(
        self,
        link: str,
        query: Union[QueryWithParameters, Mapping[str, Any]],
        target: Any = None,
        opts: Options = None
    ) -> Response:
        """Run a parameterized SQL query against a feed."""
        if query is None:
            raise UsageError("query cannot be None")
        return self._query(link, stringify(query), target, opts)

    def create(self, link: str, body: Any, target: Any = None, opts: Options = None) -> Response:
        """Create a resource (POST, expects 201)."""
        options = self._with_partition_key(body, opts)
        return self._method("POST", link, 201, target, stringify(body), options)

    def replace(self, link: str, body: Any, target: Any = None, opts: Options = None) -> Response:
        """Replace a resource (PUT, expects 200)."""
        options = self._with_partition_key(body, opts)
        return self._method("PUT", link, 200, target, stringify(body), options)

    def upsert(self, link: str, body: Any, target: Any = None, opts: Options = None) -> Response:
        """Create or replace a document (POST with the upsert header, expects 200)."""
        options = list(opts or []) + [upsert()]
        options = self._with_partition_key(body, options)
        return self._method("POST", link, 200, target, stringify(body), options)

    def replace_async(self, link: str, body: Any, target: Any = None, opts: Options = None) -> Response:
        """
        Replace a resource only if it has not changed since it was read.

        The body's ``_etag`` is sent as ``If-Match``.

        Raises:
            UsageError: If the body has no ``_etag``
            ParseError: If the body is not a JSON object
        """
        data = stringify(body)
        try:
            resource = json.loads(data)
        except ValueError as e:
            raise ParseError(f"error decoding body for async replace: {e}") from e
        if not isinstance(resource, dict) or "_etag" not in resource:
            raise UsageError("_etag does not exist for async replace")

        options = self._with_partition_key(body, opts)
        options.append(if_match(str(resource["_etag"])))
        return self._method("PUT", link, 200, target, data, options)

    def execute(self, link: str, body: Any, target: Any = None, opts: Options = None) -> Response:
        """Execute a stored procedure (POST, expects 200)."""
        return self._method("POST", link, 200, target, stringify(body), opts)

    # ========== Internals ==========

    def _query(self, link: str, body: bytes, target: Any, opts: Options) -> Response:
        options = list(opts or [])
        if self.config.partition_key_struct_field:
            options.append(cross_partition())

        request = self._build(link, "POST", body, options)
        if not self.config.partition_key_struct_field:
            request.headers.set(HEADER_VERSION, NO_PARTITION_VERSION)
        request.query_headers()
        return self._do(request, 200, target)

    def _method(
        self,
        method: str,
        link: str,
        status: int,
        target: Any,
        body: bytes,
        opts: Options
    ) -> Response:
        request = self._build(link, method, body, opts)
        return self._do(request, status, target)

    def _build(self, link: str, method: str, body: bytes, opts: Options) -> ResourceRequest:
        request = ResourceRequest(method, join_link(self.uri, link), link, body)
        return apply_options(request, self.config.master_key, opts)

    def _do(self, request: ResourceRequest, status: int, target: Any) -> Response:
        if self.config.debug:
            request.query_metrics_headers()
        return self.executor.execute(request, status, target)

    def _with_partition_key(self, body: Any, opts: Options) -> List[Optional[CallOption]]:
        """Append a partition key option derived from the body, when configured."""
        options = list(opts or [])
        if self.config.partition_key_struct_field:
            options.append(partition_key(self._partition_key_value(body)))
        return options

    def _partition_key_value(self, body: Any) -> Any:
        """
        Find the partition key value of a body.

        Lookup order: ``partition_key_value()``, the configured attribute, the
        configured mapping key, then the mapping key named by the partition
        key path.

        Raises:
            UsageError: If no value can be found
        """
        field = self.config.partition_key_struct_field

        if isinstance(body, PartitionKeyed):
            return body.partition_key_value()

        if not isinstance(body, Mapping):
            try:
                return getattr(body, field)
            except AttributeError:
                pass

        if isinstance(body, Mapping):
            if field in body:
                return body[field]
            found, value = _lookup_path(body, self.config.partition_key_path)
            if found:
                return value

        raise UsageError(f"partition key field {field!r} not found on {type(body).__name__}")


def _lookup_path(body: Mapping[str, Any], path: str) -> tuple:
    """Walk a partition key path such as ``/address/city`` through nested mappings."""
    segments = [segment for segment in path.split("/") if segment]
    if not segments:
        return False, None

    value: Any = body
    for segment in segments:
        if not isinstance(value, Mapping) or segment not in value:
            return False, None
        value = value[segment]
    return True, value
