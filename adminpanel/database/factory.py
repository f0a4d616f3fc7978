"""Selection of the data access implementation for a backend handle."""

from typing import Any, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from adminpanel.core.exceptions import ConfigurationFault
from adminpanel.database.dao.mongo import MongoDao
from adminpanel.database.dao.orm import OrmDao
from adminpanel.database.dao.sql import SqlDao
from adminpanel.database.interfaces import DataAccessObject


def create_dao(handle: Any, entity: Any, collection: Optional[str] = None) -> DataAccessObject:
    """
    Build the DAO matching the type of ``handle``.

    - ``AsyncEngine`` -> SqlDao over ``entity`` (a Table or declarative class)
    - ``async_sessionmaker`` -> OrmDao over ``entity`` (a mapped class)
    - motor database -> MongoDao over ``entity`` (a pydantic model)

    Called once per registered entity; the result is reused for the
    lifetime of the panel.

    Raises:
        ConfigurationFault: If the handle type is not supported
    """
    if isinstance(handle, AsyncEngine):
        return SqlDao(handle, entity)
    if isinstance(handle, async_sessionmaker):
        return OrmDao(handle, entity)
    if isinstance(handle, AsyncIOMotorDatabase):
        return MongoDao(handle, entity, collection=collection)
    raise ConfigurationFault(
        f"Unsupported database handle: {type(handle).__name__}"
    )
