"""Backend implementations of DataAccessObject."""

from adminpanel.database.dao.mongo import MongoDao
from adminpanel.database.dao.orm import OrmDao
from adminpanel.database.dao.sql import SqlDao

__all__ = [
    "SqlDao",
    "OrmDao",
    "MongoDao",
]
