"""
Resource link parsing.

Turns a resource path into the (link, id, type) triple used for signing.
Two shapes are understood:

    _self links    /dbs/b5NCAA==/colls/b5NCAB==/   opaque, service assigned
    id-based links /dbs/mydb/colls/mycoll/docs/mydoc

Id-based paths follow the resource hierarchy:

    /dbs                                      feed of databases
    /dbs/{db}                                 database
    /dbs/{db}/colls                           feed of collections
    /dbs/{db}/colls/{coll}                    collection
    /dbs/{db}/colls/{coll}/docs               feed of documents
    /dbs/{db}/colls/{coll}/docs/{doc}         document
    /dbs/{db}/users                           feed of users
    /dbs/{db}/users/{user}                    user
    /dbs/{db}/users/{user}/permissions        feed of permissions
    /dbs/{db}/users/{user}/permissions/{id}   permission

Paths outside this table parse to empty fields rather than raising.
"""

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Marker found in base64 encoded resource ids
SELF_LINK_MARKER = "=="


@dataclass(frozen=True)
class ResourceLink:
    """
    A parsed resource path.

    Attributes:
        raw: Path as given by the caller
        link: Canonical link used for signing (no leading slash)
        resource_id: Resource id, empty for feeds
        resource_type: Resource type token, empty when the path is not recognized
    """

    raw: str
    link: str = ""
    resource_id: str = ""
    resource_type: str = ""

    @property
    def is_feed(self) -> bool:
        return bool(self.resource_type) and not self.resource_id


def is_self_link(link: str) -> bool:
    """Check whether a path uses opaque _self segments."""
    parts = _split(link)
    return len(parts) > 2 and SELF_LINK_MARKER in parts[2]


def parse_link(link: str) -> ResourceLink:
    """
    Parse a resource path.

    Args:
        link: Resource path, with or without leading/trailing slashes

    Returns:
        ResourceLink with canonical link, id and type
    """
    parts = _split(link)
    count = len(parts)

    if count > 2 and SELF_LINK_MARKER in parts[2]:
        if count % 2 == 0:
            return ResourceLink(link, parts[-2], parts[-2], parts[-3])
        return ResourceLink(link, parts[-3], parts[-3], parts[-2])

    if count < 3 or parts[1] != "dbs":
        return _unrecognized(link)

    if count == 3:
        return ResourceLink(link, "", "", parts[1])
    if count == 4:
        return ResourceLink(link, "/".join(parts[1:3]), parts[2], parts[1])
    if count in (5, 6) and parts[3] not in ("colls", "users"):
        return _unrecognized(link)
    if count == 5:
        return ResourceLink(link, "/".join(parts[1:4]), "", parts[3])
    if count == 6:
        return ResourceLink(link, "/".join(parts[1:5]), parts[4], parts[3])
    if count == 7:
        return ResourceLink(link, "/".join(parts[1:6]), "", parts[5])
    if count == 8:
        return ResourceLink(link, "/".join(parts[1:7]), parts[6], parts[5])

    return _unrecognized(link)


def _split(link: str) -> list:
    if not link.startswith("/"):
        link = "/" + link
    if not link.endswith("/"):
        link = link + "/"
    return link.split("/")


def _unrecognized(link: str) -> ResourceLink:
    logger.debug(f"Unrecognized resource path, signing with empty type/id: {link}")
    return ResourceLink(link)
