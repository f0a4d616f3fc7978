"""Tests for backend handle construction."""

from motor.motor_asyncio import AsyncIOMotorDatabase
from sqlalchemy.pool import StaticPool

from adminpanel.core.database import create_engine, create_mongo_database
from adminpanel.database import create_dao
from adminpanel.database.dao import MongoDao
from adminpanel.models import MongoAdminUser


class TestCreateEngine:

    async def test_memory_database_shares_one_connection(self):
        engine = create_engine("sqlite+aiosqlite:///:memory:")

        assert isinstance(engine.pool, StaticPool)
        await engine.dispose()

    async def test_file_database_pools_connections(self, tmp_path):
        """
        Test file databases get a connection per checkout.

        Arrange: SQLite URL pointing at a file
        Act: Create the engine
        Assert: The pool is not a single shared connection
        """
        engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'panel.db'}")

        assert not isinstance(engine.pool, StaticPool)
        await engine.dispose()


class TestCreateMongoDatabase:

    async def test_returns_named_database(self):
        # The client connects lazily, so no server is needed
        database = create_mongo_database("mongodb://localhost:27017", "panel_test")

        assert isinstance(database, AsyncIOMotorDatabase)
        assert database.name == "panel_test"
        database.client.close()

    async def test_defaults_from_settings(self):
        database = create_mongo_database()

        assert database.name == "panel"
        assert isinstance(create_dao(database, MongoAdminUser), MongoDao)
        database.client.close()
