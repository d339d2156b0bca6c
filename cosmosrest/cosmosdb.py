"""
CosmosDB facade.

Typed convenience operations over databases, collections, documents, stored
procedures, user defined functions and partition key ranges, built on the
Client primitives.

Links are resource paths relative to the account endpoint, either id based
(``dbs/db1/colls/c1``) or self links (``dbs/b5NCAA==/colls/b5NCAIP9AAA=/``).

Author: cosmosrest contributors
"""

import logging
from typing import Any, List, Optional, Type, TypeVar

import httpx

from cosmosrest.client import Client, Options
from cosmosrest.core.config_manager import CosmosConfig
from cosmosrest.models import (
    Collection,
    CollectionFeed,
    Database,
    DatabaseFeed,
    Document,
    DocumentFeed,
    PartitionKeyRange,
    PartitionKeyRangeFeed,
    QueryWithParameters,
    StoredProcedure,
    StoredProcedureFeed,
    UserDefinedFunction,
    UserDefinedFunctionFeed,
)
from cosmosrest.pagination import PagableQuery
from cosmosrest.utils import gen_id, join_link

logger = logging.getLogger(__name__)

D = TypeVar("D")


class CosmosDB:
    """
    Cosmos DB SQL API client.

    Example:
        config = CosmosConfig(endpoint="https://acct.documents.azure.com", master_key=key)
        with CosmosDB(config) as db:
            database = db.create_database({"id": "db1"})
            docs = db.query_documents("dbs/db1/colls/c1/", "SELECT * FROM root")
    """

    def __init__(
        self,
        config: CosmosConfig,
        http_client: Optional[httpx.Client] = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        self.client = Client(config, http_client=http_client, transport=transport)

    def get_uri(self) -> str:
        return self.client.get_uri()

    def get_config(self) -> CosmosConfig:
        return self.client.get_config()

    def enable_debug(self) -> None:
        self.client.enable_debug()

    def disable_debug(self) -> None:
        self.client.disable_debug()

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "CosmosDB":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ========== Read ==========

    def read_database(self, link: str, opts: Options = None) -> Database:
        return self.client.read(link, Database, opts).data

    def read_collection(self, link: str, opts: Options = None) -> Collection:
        return self.client.read(link, Collection, opts).data

    def read_document(self, link: str, doc_type: Type[D] = Document, opts: Options = None) -> D:
        """
        Read a document.

        Args:
            link: Document link
            doc_type: Type the document is decoded into
            opts: Call options (a partitioned collection needs ``partition_key``)
        """
        return self.client.read(link, doc_type, opts).data

    def read_stored_procedure(self, link: str, opts: Options = None) -> StoredProcedure:
        return self.client.read(link, StoredProcedure, opts).data

    def read_user_defined_function(self, link: str, opts: Options = None) -> UserDefinedFunction:
        return self.client.read(link, UserDefinedFunction, opts).data

    def read_databases(self, opts: Options = None) -> List[Database]:
        return self.query_databases("", opts)

    def read_collections(self, db: str, opts: Options = None) -> List[Collection]:
        return self.query_collections(db, "", opts)

    def read_stored_procedures(self, coll: str, opts: Options = None) -> List[StoredProcedure]:
        return self.query_stored_procedures(coll, "", opts)

    def read_user_defined_functions(self, coll: str, opts: Options = None) -> List[UserDefinedFunction]:
        return self.query_user_defined_functions(coll, "", opts)

    def read_documents(
        self,
        coll: str,
        doc_type: Type[D] = Document,
        opts: Options = None
    ) -> List[D]:
        return self.query_documents(coll, "", doc_type, opts)

    # ========== Query ==========

    def query_databases(self, query: str, opts: Options = None) -> List[Database]:
        """Databases matching a query, or all databases when ``query`` is empty."""
        return self._feed("dbs", query, DatabaseFeed, opts).databases

    def query_collections(self, db: str, query: str, opts: Options = None) -> List[Collection]:
        return self._feed(join_link(db, "colls/"), query, CollectionFeed, opts).collections

    def query_stored_procedures(self, coll: str, query: str, opts: Options = None) -> List[StoredProcedure]:
        feed = self._feed(join_link(coll, "sprocs/"), query, StoredProcedureFeed, opts)
        return feed.stored_procedures

    def query_user_defined_functions(
        self,
        coll: str,
        query: str,
        opts: Options = None
    ) -> List[UserDefinedFunction]:
        feed = self._feed(join_link(coll, "udfs/"), query, UserDefinedFunctionFeed, opts)
        return feed.user_defined_functions

    def query_documents(
        self,
        coll: str,
        query: str,
        doc_type: Type[D] = Document,
        opts: Options = None
    ) -> List[D]:
        """
        Documents of a collection matching a query.

        Args:
            coll: Collection link
            query: SQL query; empty reads the whole feed
            doc_type: Type each document is decoded into
            opts: Call options (e.g. ``limit``, ``continuation``)

        Returns:
            Documents of the returned page
        """
        feed = self._feed(join_link(coll, "docs/"), query, DocumentFeed[doc_type], opts)
        return feed.documents

    def query_documents_with_parameters(
        self,
        coll: str,
        query: QueryWithParameters,
        doc_type: Type[D] = Document,
        opts: Options = None
    ) -> List[D]:
        response = self.client.query_with_parameters(
            join_link(coll, "docs/"), query, DocumentFeed[doc_type], opts
        )
        return response.data.documents

    def query_partition_key_ranges(self, coll: str, opts: Options = None) -> List[PartitionKeyRange]:
        """Physical partition key ranges of a collection."""
        feed = self._feed(join_link(coll, "pkranges/"), "", PartitionKeyRangeFeed, opts)
        return feed.partition_key_ranges

    def new_pagable_query(
        self,
        coll: str,
        query: Optional[QueryWithParameters],
        page_size: int,
        docs: List[Any],
        doc_type: Type[Any] = Document
    ) -> PagableQuery:
        """
        Create a cursor that fills ``docs`` one page at a time.

        Args:
            coll: Collection link
            query: Parameterized query
            page_size: Max documents per page
            docs: Caller-owned list replaced with each page
            doc_type: Type each document is decoded into
        """
        return PagableQuery(self.client, coll, query, page_size, docs, doc_type)

    # ========== Create / Upsert ==========

    def create_database(self, body: Any, opts: Options = None) -> Database:
        return self.client.create("dbs", body, Database, opts).data

    def create_collection(self, db: str, body: Any, opts: Options = None) -> Collection:
        """Create a collection; pass ``throughput_rus`` to provision throughput."""
        return self.client.create(join_link(db, "colls/"), body, Collection, opts).data

    def create_stored_procedure(self, coll: str, body: Any, opts: Options = None) -> StoredProcedure:
        return self.client.create(join_link(coll, "sprocs/"), body, StoredProcedure, opts).data

    def create_user_defined_function(self, coll: str, body: Any, opts: Options = None) -> UserDefinedFunction:
        return self.client.create(join_link(coll, "udfs/"), body, UserDefinedFunction, opts).data

    def create_document(self, coll: str, doc: Any, opts: Options = None) -> Any:
        """
        Create a document, assigning a random id when it has none.

        Args:
            coll: Collection link
            doc: Mapping or model; dicts and models get their ``id`` filled in place
            opts: Call options

        Returns:
            The created document, decoded into the type of ``doc``
        """
        _ensure_id(doc)
        return self.client.create(join_link(coll, "docs/"), doc, _target_for(doc), opts).data

    def upsert_document(self, coll: str, doc: Any, opts: Options = None) -> Any:
        _ensure_id(doc)
        return self.client.upsert(join_link(coll, "docs/"), doc, _target_for(doc), opts).data

    # ========== Delete ==========

    def delete_database(self, link: str, opts: Options = None) -> None:
        self.client.delete(link, opts)

    def delete_collection(self, link: str, opts: Options = None) -> None:
        self.client.delete(link, opts)

    def delete_document(self, link: str, opts: Options = None) -> None:
        self.client.delete(link, opts)

    def delete_stored_procedure(self, link: str, opts: Options = None) -> None:
        self.client.delete(link, opts)

    def delete_user_defined_function(self, link: str, opts: Options = None) -> None:
        self.client.delete(link, opts)

    # ========== Replace ==========

    def replace_database(self, link: str, body: Any, opts: Options = None) -> Database:
        return self.client.replace(link, body, Database, opts).data

    def replace_document(self, link: str, doc: Any, opts: Options = None) -> Any:
        return self.client.replace(link, doc, _target_for(doc), opts).data

    def replace_document_async(self, link: str, doc: Any, opts: Options = None) -> Any:
        """Replace a document only if its ``_etag`` still matches the stored one."""
        return self.client.replace_async(link, doc, _target_for(doc), opts).data

    def replace_stored_procedure(self, link: str, body: Any, opts: Options = None) -> StoredProcedure:
        return self.client.replace(link, body, StoredProcedure, opts).data

    def replace_user_defined_function(self, link: str, body: Any, opts: Options = None) -> UserDefinedFunction:
        return self.client.replace(link, body, UserDefinedFunction, opts).data

    # ========== Execute ==========

    def execute_stored_procedure(
        self,
        link: str,
        params: Any,
        target: Any = Any,
        opts: Options = None
    ) -> Any:
        """
        Execute a stored procedure.

        Args:
            link: Stored procedure link
            params: Positional arguments passed to the procedure (a JSON array)
            target: Type the procedure's result is decoded into
            opts: Call options (a partitioned collection needs ``partition_key``)

        Returns:
            The procedure's result
        """
        return self.client.execute(link, params, target, opts).data

    def _feed(self, link: str, query: str, feed_type: Any, opts: Options) -> Any:
        if query:
            return self.client.query(link, query, feed_type, opts).data
        return self.client.read(link, feed_type, opts).data


def _ensure_id(doc: Any) -> None:
    if isinstance(doc, dict):
        if not doc.get("id"):
            doc["id"] = gen_id()
    elif hasattr(doc, "id") and not getattr(doc, "id"):
        doc.id = gen_id()


def _target_for(doc: Any) -> Any:
    """Decode a returned document into the same shape that was sent."""
    if isinstance(doc, dict):
        return dict
    return type(doc)
