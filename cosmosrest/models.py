"""
Cosmos DB Models.

Pydantic models for the resources exchanged with the Cosmos DB REST API.
Service-assigned system properties (``_rid``, ``_self``, ``_etag``, ``_ts``)
are exposed under readable attribute names and serialized back under their
wire names.

Author: cosmosrest contributors
"""

import math
from datetime import timedelta
from typing import Any, ClassVar, FrozenSet, Generic, List, Optional, Set, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")


class Resource(BaseModel):
    """Identity and metadata shared by every resource.

    Attributes:
        id: User supplied identifier
        self_link: Addressable path of the resource (``_self``)
        etag: Entity tag for optimistic concurrency (``_etag``)
        rid: Service-assigned resource id (``_rid``)
        ts: Last update timestamp (``_ts``)
    """

    id: str = ""
    self_link: str = Field(default="", alias="_self")
    etag: str = Field(default="", alias="_etag")
    rid: str = Field(default="", alias="_rid")
    ts: int = Field(default=0, alias="_ts")

    model_config = ConfigDict(populate_by_name=True)

    # Non-system fields dropped from request bodies while unset
    OMIT_WHEN_EMPTY: ClassVar[FrozenSet[str]] = frozenset({"id", "ttl"})

    def empty_system_fields(self) -> Set[str]:
        """Names of unset service-assigned fields (wire name starting with ``_``)."""
        names = set()
        for name, field in type(self).model_fields.items():
            if name not in self.OMIT_WHEN_EMPTY and not (field.alias or "").startswith("_"):
                continue
            if getattr(self, name) == field.get_default(call_default_factory=True):
                names.add(name)
        return names

    def to_body(self) -> dict:
        """Serialize for a request body, omitting empty system properties.

        User fields are always sent, including ones equal to their default.
        """
        return self.model_dump(by_alias=True, exclude=self.empty_system_fields())

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude=self.empty_system_fields())


class IncludedPath(BaseModel):
    path: str = ""
    indexes: List[dict] = Field(default_factory=list)


class IndexingPolicy(BaseModel):
    """Collection indexing policy.

    Attributes:
        automatic: Whether indexing is automatic
        indexing_mode: Indexing mode (consistent, lazy, none)
        included_paths: Paths included in the index
    """

    automatic: bool = True
    indexing_mode: str = Field(default="consistent", alias="indexingMode")
    included_paths: List[IncludedPath] = Field(default_factory=list, alias="includedPaths")

    model_config = ConfigDict(populate_by_name=True)


class PartitionKeyDef(BaseModel):
    """Partition key definition for a collection.

    Attributes:
        paths: Partition key paths (e.g., ["/userId"])
        kind: Partition key kind (Hash or Range)
    """

    paths: List[str] = Field(default_factory=list)
    kind: str = "Hash"

    @field_validator("paths")
    @classmethod
    def validate_paths(cls, v: List[str]) -> List[str]:
        """Validate partition key paths.

        Raises:
            ValueError: If a path does not start with '/'
        """
        for path in v:
            if not path.startswith("/"):
                raise ValueError(f"Partition key path must start with '/': {path}")
        return v


class Database(Resource):
    """Cosmos DB database."""

    colls: str = Field(default="", alias="_colls")
    users: str = Field(default="", alias="_users")


class Collection(Resource):
    """Cosmos DB collection (container)."""

    OMIT_WHEN_EMPTY: ClassVar[FrozenSet[str]] = Resource.OMIT_WHEN_EMPTY | {"indexing_policy", "partition_key"}

    indexing_policy: Optional[IndexingPolicy] = Field(default=None, alias="indexingPolicy")
    partition_key: Optional[PartitionKeyDef] = Field(default=None, alias="partitionKey")
    docs: str = Field(default="", alias="_docs")
    udfs: str = Field(default="", alias="_udfs")
    sprocs: str = Field(default="", alias="_sprocs")
    triggers: str = Field(default="", alias="_triggers")
    conflicts: str = Field(default="", alias="_conflicts")


class Document(Resource):
    """Cosmos DB document. Fields beyond the system properties are kept as extras."""

    attachments: str = Field(default="", alias="_attachments")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class StoredProcedure(Resource):
    body: str = ""


class UserDefinedFunction(Resource):
    body: str = ""


class PartitionKeyRange(Resource):
    """Physical partition key range of a collection."""

    min_inclusive: str = Field(default="", alias="minInclusive")
    max_exclusive: str = Field(default="", alias="maxExclusive")


class Expirable(BaseModel):
    """Mixin for documents carrying a time-to-live in seconds.

    ``ttl`` stays off the wire until set; -1 disables expiry for the document.
    """

    ttl: Optional[int] = None

    def set_ttl(self, duration: timedelta) -> None:
        self.ttl = int(round(duration.total_seconds()))


class QueryParameter(BaseModel):
    name: str
    value: Any = None


class QueryWithParameters(BaseModel):
    """Parameterized SQL query.

    Example:
        QueryWithParameters(
            query="SELECT * FROM root r WHERE r._ts > @_ts",
            parameters=[QueryParameter(name="@_ts", value=1459216957)],
        )
    """

    query: str
    parameters: List[QueryParameter] = Field(default_factory=list)


class Metrics(BaseModel):
    """Query execution metrics and request charge of a response."""

    total_execution_time_in_ms: float = 0.0
    query_compile_time_in_ms: float = 0.0
    query_logical_plan_build_time_in_ms: float = 0.0
    query_physical_plan_build_time_in_ms: float = 0.0
    query_optimization_time_in_ms: float = 0.0
    vm_execution_time_in_ms: float = 0.0
    index_lookup_time_in_ms: float = 0.0
    document_load_time_in_ms: float = 0.0
    system_function_execute_time_in_ms: float = 0.0
    user_function_execute_time_in_ms: float = 0.0
    retrieved_document_count: int = 0
    retrieved_document_size: int = 0
    output_document_count: int = 0
    write_output_time_in_ms: float = 0.0
    index_utilization_ratio: float = 0.0
    request_charge: float = 0.0


# Header key -> Metrics field
METRIC_FIELDS = {
    "totalExecutionTimeInMs": "total_execution_time_in_ms",
    "queryCompileTimeInMs": "query_compile_time_in_ms",
    "queryLogicalPlanBuildTimeInMs": "query_logical_plan_build_time_in_ms",
    "queryPhysicalPlanBuildTimeInMs": "query_physical_plan_build_time_in_ms",
    "queryOptimizationTimeInMs": "query_optimization_time_in_ms",
    "VMExecutionTimeInMs": "vm_execution_time_in_ms",
    "indexLookupTimeInMs": "index_lookup_time_in_ms",
    "documentLoadTimeInMs": "document_load_time_in_ms",
    "systemFunctionExecuteTimeInMs": "system_function_execute_time_in_ms",
    "userFunctionExecuteTimeInMs": "user_function_execute_time_in_ms",
    "retrievedDocumentCount": "retrieved_document_count",
    "retrievedDocumentSize": "retrieved_document_size",
    "outputDocumentCount": "output_document_count",
    "writeOutputTimeInMs": "write_output_time_in_ms",
    "indexUtilizationRatio": "index_utilization_ratio",
}

INTEGER_METRICS = frozenset({
    "retrieved_document_count",
    "retrieved_document_size",
    "output_document_count",
})


def metric_value(field: str, value: float) -> Any:
    """Floor integer metrics, pass floats through."""
    if field in INTEGER_METRICS:
        return int(math.floor(value))
    return value


# ========== Feed envelopes ==========

class DatabaseFeed(BaseModel):
    databases: List[Database] = Field(default_factory=list, alias="Databases")
    count: int = Field(default=0, alias="_count")


class CollectionFeed(BaseModel):
    collections: List[Collection] = Field(default_factory=list, alias="DocumentCollections")
    count: int = Field(default=0, alias="_count")


class StoredProcedureFeed(BaseModel):
    stored_procedures: List[StoredProcedure] = Field(default_factory=list, alias="StoredProcedures")
    count: int = Field(default=0, alias="_count")


class UserDefinedFunctionFeed(BaseModel):
    user_defined_functions: List[UserDefinedFunction] = Field(
        default_factory=list, alias="UserDefinedFunctions"
    )
    count: int = Field(default=0, alias="_count")


class PartitionKeyRangeFeed(BaseModel):
    partition_key_ranges: List[PartitionKeyRange] = Field(
        default_factory=list, alias="PartitionKeyRanges"
    )
    count: int = Field(default=0, alias="_count")


class DocumentFeed(BaseModel, Generic[T]):
    """Page of documents decoded into the caller's document type."""

    documents: List[T] = Field(default_factory=list, alias="Documents")
    count: int = Field(default=0, alias="_count")
