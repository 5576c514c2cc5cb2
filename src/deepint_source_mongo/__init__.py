"""MongoDB external data source for Deep Intelligence.

Includes the feature schema and instance codec, filter sanitizing and
compilation to MongoDB queries, and background propagation of updates to
the remote consumer.
"""

from __future__ import annotations

from .codec import (
    EPOCH,
    Instance,
    InstanceValue,
    coerce,
    decode_document,
    encode_document,
    encode_instance,
    sanitize_instances,
    stringify,
)
from .config import SourceSettings, get_settings
from .exceptions import (
    DeepintSourceError,
    InfrastructureError,
    MongoConnectionError,
    MongoQueryError,
    PersistenceError,
    UpdateDeliveryError,
)
from .features import Feature, FeatureSchema, FeatureType
from .mongo import MongoCollectionGateway, MongoConnectionManager, MongoQueryBuilder
from .query import (
    MATCH_ALL,
    MemoryOperatorRegistry,
    Predicate,
    QueryTree,
    build_default_registry,
    compile_query_tree,
    sanitize_filter,
    sanitize_query_tree,
)
from .source import DataSource, QueryResult
from .updates import (
    HttpUpdateSender,
    InMemoryUpdateSender,
    RetryPolicy,
    UpdateNotifier,
    UpdateQueue,
)

__version__ = "1.0.0"

__all__ = [
    # Service
    "DataSource",
    "QueryResult",
    "SourceSettings",
    "get_settings",
    # Schema / codec
    "Feature",
    "FeatureSchema",
    "FeatureType",
    "Instance",
    "InstanceValue",
    "EPOCH",
    "coerce",
    "stringify",
    "decode_document",
    "encode_document",
    "encode_instance",
    "sanitize_instances",
    # Filters
    "QueryTree",
    "Predicate",
    "MATCH_ALL",
    "sanitize_query_tree",
    "sanitize_filter",
    "compile_query_tree",
    "MemoryOperatorRegistry",
    "build_default_registry",
    # Storage
    "MongoConnectionManager",
    "MongoCollectionGateway",
    "MongoQueryBuilder",
    # Updates
    "UpdateQueue",
    "UpdateNotifier",
    "RetryPolicy",
    "HttpUpdateSender",
    "InMemoryUpdateSender",
    # Exceptions
    "DeepintSourceError",
    "InfrastructureError",
    "PersistenceError",
    "MongoConnectionError",
    "MongoQueryError",
    "UpdateDeliveryError",
]
