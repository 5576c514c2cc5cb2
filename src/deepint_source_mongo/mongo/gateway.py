"""MongoCollectionGateway: thin storage access for the source collection."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pymongo.errors import PyMongoError

from ..exceptions import MongoQueryError
from .query_builder import MongoQueryBuilder

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from .connection import MongoConnectionManager

logger = logging.getLogger(__name__)


class MongoCollectionGateway:
    """
    Issues insert, count and find operations against one collection.

    Filters arrive already rendered as MongoDB documents. No locking is
    done here; the server is the only arbiter of consistency. Driver
    errors surface as :class:`MongoQueryError`.
    """

    def __init__(
        self,
        connection: MongoConnectionManager,
        collection: str,
        *,
        query_builder: MongoQueryBuilder | None = None,
    ) -> None:
        self._connection = connection
        self._collection_name = collection
        self._query_builder = query_builder or MongoQueryBuilder()

    @property
    def query_builder(self) -> MongoQueryBuilder:
        return self._query_builder

    async def _collection(self) -> Any:
        database = await self._connection.database()
        return database.get_collection(self._collection_name)

    async def insert_many(self, documents: list[dict[str, Any]]) -> int:
        """Insert *documents*; returns how many were inserted."""
        if not documents:
            return 0
        coll = await self._collection()
        try:
            await coll.insert_many(documents)
        except PyMongoError as e:
            raise MongoQueryError(f"Insert failed: {e}") from e
        return len(documents)

    async def count(self, match: dict[str, Any]) -> int:
        coll = await self._collection()
        try:
            return int(await coll.count_documents(match))
        except PyMongoError as e:
            raise MongoQueryError(f"Count failed: {e}") from e

    async def stream(
        self,
        *,
        match: dict[str, Any],
        sort: list[tuple[str, int]] | None = None,
        skip: int | None = None,
        limit: int | None = None,
        fields: list[str] | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        """Yield matching documents one at a time."""
        pipeline = self._query_builder.build_pipeline(
            match=match, sort=sort, skip=skip, limit=limit, fields=fields
        )
        logger.debug("Streaming %s with pipeline %s", self._collection_name, pipeline)
        coll = await self._collection()
        try:
            async for doc in coll.aggregate(pipeline):
                yield doc
        except PyMongoError as e:
            raise MongoQueryError(f"Query failed: {e}") from e

    async def distinct_values(
        self, field: str, *, match: dict[str, Any], limit: int
    ) -> list[Any]:
        """Up to *limit* distinct non-empty values of *field*, ascending."""
        pipeline = self._query_builder.build_distinct_pipeline(
            field, match=match, limit=limit
        )
        coll = await self._collection()
        try:
            return [doc["_id"] async for doc in coll.aggregate(pipeline)]
        except PyMongoError as e:
            raise MongoQueryError(f"Distinct query failed: {e}") from e
