"""
Backend connection handles.

Provides factories for the three handle types a data access object can be
built over: an async SQLAlchemy engine (Core backend), an async session
factory (ORM backend) and a motor database (document backend).
Handles are created once at startup and owned by the caller.
"""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from adminpanel.core.config import settings


def create_engine(database_url: Optional[str] = None, echo: bool = False) -> AsyncEngine:
    """
    Create and configure an async SQLAlchemy engine.

    For SQLite:
    - Uses StaticPool for :memory: URLs only (one shared connection keeps
      the database alive); file databases get a connection per checkout
    - Enables check_same_thread=False for async compatibility
    - Turns on foreign key enforcement for every connection

    Args:
        database_url: Database URL (defaults to settings.database_url)
        echo: Log emitted SQL (debug only)

    Returns:
        Configured AsyncEngine instance
    """
    url = database_url or settings.database_url
    is_sqlite = "sqlite" in url

    engine_kwargs = {
        "echo": echo,
        "connect_args": {"check_same_thread": False} if is_sqlite else {},
    }

    # A shared connection would also share transactions between callers
    if is_sqlite and ":memory:" in url:
        engine_kwargs["poolclass"] = StaticPool

    engine = create_async_engine(url, **engine_kwargs)

    if is_sqlite:
        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ANN001
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Create the async session factory used by the ORM backend.

    Objects are not expired on commit so entities returned by a data
    access call stay readable after their session closes.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def create_mongo_database(
    mongo_url: Optional[str] = None,
    database_name: Optional[str] = None,
) -> AsyncIOMotorDatabase:
    """
    Connect to MongoDB and return the panel database handle.

    The client connects lazily; no network round trip happens here.
    """
    client = AsyncIOMotorClient(mongo_url or settings.mongo_url, tz_aware=True)
    return client[database_name or settings.mongo_database]
