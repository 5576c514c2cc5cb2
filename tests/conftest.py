"""Shared fixtures: feature schemas and a mongomock-backed connection."""

import pytest

from deepint_source_mongo.features import FeatureSchema
from deepint_source_mongo.mongo import MongoCollectionGateway, MongoConnectionManager

pytest_plugins = ["pytest_asyncio"]


@pytest.fixture
def iris_schema() -> FeatureSchema:
    return FeatureSchema.from_names(["sepalLength", "species"], ["numeric", "nominal"])


@pytest.fixture
def schema() -> FeatureSchema:
    """One feature of every type."""
    return FeatureSchema.from_names(
        ["name", "species", "weight", "active", "born"],
        ["text", "nominal", "numeric", "logic", "date"],
    )


@pytest.fixture
async def mongo_connection():
    """Create a MongoDB connection for testing."""
    # Use mongomock for unit tests to avoid real database dependency
    try:
        from mongomock_motor import AsyncMongoMockClient

        # Create a mock connection manager
        connection = MongoConnectionManager.__new__(MongoConnectionManager)
        connection._client = AsyncMongoMockClient(default_database_name="test_db")
        connection._database = "test_db"
        connection._url = "mongodb://mock:27017"

        # Make connect() return the client and mark as "connected"
        async def _mock_connect():
            return connection._client

        connection.connect = _mock_connect

        yield connection

    except ImportError:
        pytest.skip("mongomock-motor not installed")


@pytest.fixture
def gateway(mongo_connection) -> MongoCollectionGateway:
    return MongoCollectionGateway(mongo_connection, "instances")
