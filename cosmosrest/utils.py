"""Small helpers shared by the client and the CosmosDB facade."""

import json
import uuid
from typing import Any

from pydantic import BaseModel

from cosmosrest.exceptions import ParseError
from cosmosrest.models import Resource


def gen_id() -> str:
    """Random document id (uuid4)."""
    return str(uuid.uuid4())


def join_link(base: str, *parts: str) -> str:
    """
    Join an endpoint or link with further path segments.

    Example:
        join_link("dbs/db1/", "colls/") -> "dbs/db1/colls/"
    """
    link = base
    for part in parts:
        if not part:
            continue
        if not link:
            link = part
        elif link.endswith("/") and part.startswith("/"):
            link = link + part[1:]
        elif link.endswith("/") or part.startswith("/"):
            link = link + part
        else:
            link = f"{link}/{part}"
    return link


def querify(query: str) -> bytes:
    """Wrap a SQL string in the JSON body the query endpoint expects."""
    return json.dumps({"query": query}).encode("utf-8")


def stringify(body: Any) -> bytes:
    """
    Encode a request body.

    Strings and bytes are sent as-is, pydantic models by alias with every
    user field (empty system properties of resources are left out), anything
    else as JSON.

    Raises:
        ParseError: If the body is not JSON serializable
    """
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    if isinstance(body, Resource):
        return body.to_json().encode("utf-8")
    if isinstance(body, BaseModel):
        return body.model_dump_json(by_alias=True).encode("utf-8")
    try:
        return json.dumps(body).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise ParseError(f"error encoding request body: {e}") from e
