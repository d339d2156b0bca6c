"""
cosmosrest: Cosmos DB REST client

A client for the Azure Cosmos DB SQL REST API: signed requests, call options,
retries, paging and query metrics.
"""

__version__ = "0.1.0"

from .client import Client, PartitionKeyed
from .core.config_manager import ConfigManager, CosmosConfig
from .cosmosdb import CosmosDB
from .pagination import PagableQuery
from .response import Response
from .transport.context import RequestContext

__all__ = [
    "Client",
    "ConfigManager",
    "CosmosConfig",
    "CosmosDB",
    "PagableQuery",
    "PartitionKeyed",
    "RequestContext",
    "Response",
    "__version__",
]
