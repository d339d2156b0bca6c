"""
Resource requests.

A ResourceRequest is an outbound HTTP request plus the resource link, id and
type it targets. It is signed with the master key and then decorated by call
options, in order, before the executor sends it.
"""

import shlex
from typing import Iterable, List, Optional, Tuple

import httpx

from cosmosrest.auth.masterkey import authorization_token, format_http_date
from cosmosrest.request.headers import (
    HEADER_AUTH,
    HEADER_CONTENT_LENGTH,
    HEADER_CONTENT_TYPE,
    HEADER_IS_QUERY,
    HEADER_POPULATE_QUERY_METRICS,
    HEADER_QUERY_VERSION,
    HEADER_USER_AGENT,
    HEADER_VERSION,
    HEADER_X_DATE,
    SUPPORTED_QUERY_VERSION,
    SUPPORTED_VERSION,
    USER_AGENT,
    RequestHeaders,
)
from cosmosrest.request.links import ResourceLink, parse_link
from cosmosrest.request.options import CallOption


class ResourceRequest:
    """
    Request aimed at a single resource or resource feed.

    Attributes:
        method: HTTP method
        url: Absolute request URL
        body: Encoded request body
        headers: Request headers
        resource: Parsed resource link
        context: Optional RequestContext attached by ``with_context``
    """

    def __init__(self, method: str, url: str, link: str, body: bytes = b""):
        self.method = method.upper()
        self.url = url
        self.body = body
        self.headers = RequestHeaders()
        self.resource: ResourceLink = parse_link(link)
        self.context = None

    @property
    def resource_link(self) -> str:
        return self.resource.link

    @property
    def resource_id(self) -> str:
        return self.resource.resource_id

    @property
    def resource_type(self) -> str:
        return self.resource.resource_type

    def default_headers(self, master_key: str) -> None:
        """
        Set the date, version, user agent and authorization headers.

        Raises:
            AuthError: If the master key cannot be used for signing
        """
        date = format_http_date()
        self.headers.set(HEADER_X_DATE, date)
        self.headers.set(HEADER_VERSION, SUPPORTED_VERSION)
        self.headers.set(HEADER_USER_AGENT, USER_AGENT)

        token = authorization_token(
            master_key,
            self.method,
            self.resource_type,
            self.resource_link,
            date,
        )
        self.headers.set(HEADER_AUTH, token)

    def query_headers(self) -> None:
        """Mark the request as a SQL query."""
        self.headers.add(HEADER_QUERY_VERSION, SUPPORTED_QUERY_VERSION)
        self.headers.set(HEADER_CONTENT_TYPE, "application/query+json")
        self.headers.set(HEADER_IS_QUERY, "true")
        self.headers.set(HEADER_CONTENT_LENGTH, str(len(self.body)))

    def query_metrics_headers(self) -> None:
        self.headers.set(HEADER_POPULATE_QUERY_METRICS, "true")

    def to_httpx(self, timeout: Optional[httpx.Timeout] = None) -> httpx.Request:
        """
        Build a fresh httpx request; called once per attempt.

        Args:
            timeout: Timeout for this attempt, carried in the request extensions
        """
        headers: List[Tuple[str, str]] = self.headers.items()
        if HEADER_CONTENT_TYPE not in self.headers and self.body:
            headers.append((HEADER_CONTENT_TYPE, "application/json"))
        extensions = {"timeout": timeout.as_dict()} if timeout is not None else None
        return httpx.Request(
            self.method,
            self.url,
            headers=headers,
            content=self.body,
            extensions=extensions,
        )

    def to_curl(self) -> str:
        """Render the request as an equivalent curl command."""
        command = ["curl", "-X", self.method]
        for name, value in self.headers.items():
            command.extend(["-H", f"{name}: {value}"])
        if self.body:
            command.extend(["-d", self.body.decode("utf-8", errors="replace")])
        command.append(self.url)
        return " ".join(shlex.quote(part) for part in command)

    def __repr__(self) -> str:
        return (
            f"ResourceRequest(method={self.method!r}, url={self.url!r}, "
            f"resource_id={self.resource_id!r}, resource_type={self.resource_type!r})"
        )


def apply_options(
    request: ResourceRequest,
    master_key: str,
    options: Optional[Iterable[Optional[CallOption]]] = None
) -> ResourceRequest:
    """
    Sign a request and apply call options in order.

    Default headers always come first. ``None`` options are skipped. The
    first option that raises aborts the pipeline; headers written by earlier
    options are left in place.

    Args:
        request: Request to decorate
        master_key: Base64-encoded master key
        options: Call options

    Returns:
        The same request, for chaining
    """
    request.default_headers(master_key)

    for option in options or ():
        if option is None:
            continue
        option(request)

    return request
