"""MongoConnectionManager: Motor client and database of the source collection."""

from __future__ import annotations

import logging
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ConfigurationError, PyMongoError

from ..exceptions import MongoConnectionError

logger = logging.getLogger(__name__)

DEFAULT_MONGO_URL = "mongodb://localhost:27017/deepint"


class MongoConnectionManager:
    """
    Owns the Motor client of the data source.

    The client is created lazily on first use; Motor itself connects on the
    first operation. ``database`` names the database that holds the
    instance collection. Without it, the database in the connection URL
    (``mongodb://host/<database>``) is used.
    """

    def __init__(
        self,
        url: str = DEFAULT_MONGO_URL,
        *,
        database: str | None = None,
        server_selection_timeout_ms: int = 5000,
        connect_timeout_ms: int = 10000,
        **client_options: Any,
    ) -> None:
        self._url = url
        self._database = database
        self._client_options: dict[str, Any] = {
            "serverSelectionTimeoutMS": server_selection_timeout_ms,
            "connectTimeoutMS": connect_timeout_ms,
            **client_options,
        }
        self._client: AsyncIOMotorClient[Any] | None = None

    async def connect(self) -> AsyncIOMotorClient[Any]:
        """Return the Motor client, creating it on the first call."""
        if self._client is None:
            try:
                self._client = AsyncIOMotorClient(self._url, **self._client_options)
            except (PyMongoError, ValueError, TypeError) as e:
                raise MongoConnectionError(
                    f"Invalid MongoDB connection settings: {e}"
                ) from e
            logger.debug("Motor client created for %s", self._database or "URL default")
        return self._client

    @property
    def client(self) -> AsyncIOMotorClient[Any]:
        if self._client is None:
            raise MongoConnectionError("MongoDB client not created; call connect()")
        return self._client

    async def database(self) -> AsyncIOMotorDatabase[Any]:
        """The configured database, falling back to the one in the URL."""
        client = await self.connect()
        if self._database:
            return client.get_database(self._database)
        try:
            return client.get_default_database()
        except ConfigurationError as e:
            raise MongoConnectionError(
                "No database configured and none named in the connection URL"
            ) from e

    def close(self) -> None:
        """Close the Motor client; a later call to :meth:`connect` reopens it."""
        if self._client is not None:
            self._client.close()
            self._client = None

    async def health_check(self) -> bool:
        """True when the server answers a ``ping``."""
        if self._client is None:
            return False
        try:
            await self._client.admin.command("ping")
        except PyMongoError as e:
            logger.warning("MongoDB health check failed: %s", e)
            return False
        return True
