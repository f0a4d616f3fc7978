"""
Pytest configuration and shared fixtures.

This module provides:
- Environment variable setup for tests
- Test entity definitions for every backend
- In-memory database handles and DAO fixtures
"""

import enum
import os
from datetime import datetime
from typing import ClassVar, Optional

import pytest


# Set test environment variables BEFORE any imports
# This must happen first to ensure settings load with test values
os.environ["PANEL_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["PANEL_ADMIN_USERNAME"] = "admin"
os.environ["PANEL_ADMIN_PASSWORD"] = "test_admin_password"
os.environ["PANEL_SESSION_MAX_AGE_SECONDS"] = "60"
os.environ["PANEL_LOG_JSON"] = "false"

from bson import ObjectId  # noqa: E402
from mongomock_motor import AsyncMongoMockClient  # noqa: E402
from pydantic import BaseModel, ConfigDict, Field  # noqa: E402
from sqlalchemy import Boolean, Column, DateTime, Enum, Integer, String  # noqa: E402
from sqlalchemy.orm import declarative_base  # noqa: E402

from adminpanel.core.database import create_engine, create_session_maker  # noqa: E402
from adminpanel.database.dao import MongoDao, OrmDao, SqlDao  # noqa: E402
from adminpanel.models import AdminUser, Base, MongoAdminUser  # noqa: E402


# Entities used only by the tests live on their own metadata
BookBase = declarative_base()


class BookStatus(enum.Enum):
    """Constant names deliberately differ from values."""

    DRAFT = "draft"
    PUBLISHED = "published"
    OUT_OF_PRINT = "out-of-print"


class Book(BookBase):
    __tablename__ = "books"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    page_count = Column(Integer, nullable=True)
    in_print = Column(Boolean, nullable=False, default=True)
    published_at = Column(DateTime, nullable=True)
    status = Column(Enum(BookStatus, name="book_status"), nullable=False, default=BookStatus.DRAFT)


class BookDocument(BaseModel):
    collection_name: ClassVar[str] = "books"

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: Optional[ObjectId] = Field(default=None, alias="_id")
    title: str
    page_count: Optional[int] = None
    in_print: bool = True
    published_at: Optional[datetime] = None
    status: BookStatus = BookStatus.DRAFT


@pytest.fixture
def book_model():
    return Book


@pytest.fixture
def book_document():
    return BookDocument


@pytest.fixture
def book_status():
    return BookStatus


@pytest.fixture
async def engine():
    """
    In-memory SQLite engine with the panel and test tables created.

    Yields:
        AsyncEngine shared by the Core and ORM fixtures of one test
    """
    engine = create_engine("sqlite+aiosqlite:///:memory:")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.run_sync(BookBase.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def file_engine(tmp_path):
    """
    File-backed SQLite engine, one connection per checkout.

    Used where concurrent transactions must not share a connection.
    """
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'panel.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.run_sync(BookBase.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return create_session_maker(engine)


@pytest.fixture
def mongo_database():
    """Fresh in-memory MongoDB database per test."""
    client = AsyncMongoMockClient()
    return client["panel_test"]


@pytest.fixture
def sql_book_dao(engine):
    return SqlDao(engine, Book.__table__)


@pytest.fixture
def orm_book_dao(session_maker):
    return OrmDao(session_maker, Book)


@pytest.fixture
def mongo_book_dao(mongo_database):
    return MongoDao(mongo_database, BookDocument)


@pytest.fixture
def sql_admin_dao(engine):
    return SqlDao(engine, AdminUser)


@pytest.fixture
def orm_admin_dao(session_maker):
    return OrmDao(session_maker, AdminUser)


@pytest.fixture
def mongo_admin_dao(mongo_database):
    return MongoDao(mongo_database, MongoAdminUser)


@pytest.fixture(params=["sql", "orm", "mongo"])
def admin_dao(request, engine, session_maker, mongo_database):
    """The admin users DAO for each backend in turn."""
    if request.param == "sql":
        return SqlDao(engine, AdminUser)
    if request.param == "orm":
        return OrmDao(session_maker, AdminUser)
    return MongoDao(mongo_database, MongoAdminUser)
