"""
Paged document queries.

Usage:
    docs = []
    pager = db.new_pagable_query("dbs/db1/colls/c1/", query, 100, docs)
    while True:
        pager.next()
        handle(docs)
        if not pager.continuation:
            break
"""

import logging
from typing import Any, List, Optional, Type

from cosmosrest.exceptions import UsageError
from cosmosrest.models import Document, DocumentFeed, QueryWithParameters
from cosmosrest.request.options import CallOption, continuation, limit, session_token
from cosmosrest.utils import join_link

logger = logging.getLogger(__name__)


class PagableQuery:
    """
    Cursor over the pages of a parameterized document query.

    Each call to ``next()`` fetches one page and replaces the contents of the
    bound ``docs`` list with it. The first page is fetched with the page size
    only; later pages resume from the last continuation token within the
    session of the first page.

    Not thread safe.

    Attributes:
        offset: Number of pages fetched so far
        continuation: Continuation token of the last page, empty when done
        session_token: Session token captured from the first page
    """

    def __init__(
        self,
        client: Any,
        coll: str,
        query: Optional[QueryWithParameters],
        page_size: int,
        docs: List[Any],
        doc_type: Type[Any] = Document
    ):
        """
        Initialize pagable query.

        Args:
            client: Client used to run the query
            coll: Collection link
            query: Parameterized query
            page_size: Max documents per page
            docs: Caller-owned list filled with each page
            doc_type: Type each document is decoded into
        """
        self.client = client
        self.coll = coll
        self.query = query
        self.page_size = page_size
        self.docs = docs
        self.doc_type = doc_type
        self.offset = 0
        self.continuation = ""
        self.session_token = ""

    def next(self) -> None:
        """
        Fetch the next page into ``docs``.

        Raises:
            UsageError: If the query is None
            CosmosError: Any error from the request; the cursor is left unchanged
        """
        if self.offset == 0:
            response = self._do_query([limit(self.page_size)])
            self.session_token = response.session_token()
        else:
            response = self._do_query([
                limit(self.page_size),
                continuation(self.continuation),
                session_token(self.session_token),
            ])

        self.offset += 1
        self.continuation = response.continuation()
        logger.debug(
            f"Fetched page {self.offset} of {self.coll} "
            f"({len(self.docs)} documents, more={bool(self.continuation)})"
        )

    def _do_query(self, opts: List[CallOption]) -> Any:
        if self.query is None:
            raise UsageError("QueryWithParameters cannot be None")

        response = self.client.query_with_parameters(
            join_link(self.coll, "docs/"),
            self.query,
            target=DocumentFeed[self.doc_type],
            opts=opts,
        )
        self.docs[:] = response.data.documents
        return response
