"""MongoDB storage: connection, query rendering and collection access."""

from __future__ import annotations

from .connection import MongoConnectionManager
from .gateway import MongoCollectionGateway
from .query_builder import MongoQueryBuilder

__all__ = [
    "MongoConnectionManager",
    "MongoCollectionGateway",
    "MongoQueryBuilder",
]
