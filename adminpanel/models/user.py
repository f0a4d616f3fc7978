"""
Admin user models for panel authentication.

The admin_users store exists once per backend flavour:
- ``AdminUser``: declarative model; its ``__table__`` also serves the Core backend
- ``MongoAdminUser``: pydantic document model for the MongoDB backend

Passwords are stored as bcrypt hashes produced by core.security.
"""

import enum
from datetime import datetime
from typing import ClassVar, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import Column, Enum, Integer, String

from adminpanel.models.base import Base, ModelMixin, TimestampMixin, utc_now


class AdminRole(str, enum.Enum):
    """Role of a panel administrator. Stored by constant name."""

    SUPER_ADMIN = "SUPER_ADMIN"
    EDITOR = "EDITOR"
    VIEWER = "VIEWER"


class AdminUser(Base, TimestampMixin, ModelMixin):
    """
    Admin user model for panel authentication.

    Attributes:
        id: Auto-increment integer primary key
        username: Unique username for login
        password: Bcrypt-hashed password (never store plaintext)
        role: AdminRole, SUPER_ADMIN unless stated otherwise
        created: When the admin was created (from TimestampMixin)
        modified: When the admin was last updated (from TimestampMixin)
    """

    __tablename__ = "admin_users"

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        doc="Auto-increment primary key"
    )

    username = Column(
        String(255),
        nullable=False,
        unique=True,
        doc="Unique username for authentication"
    )

    password = Column(
        String(255),
        nullable=False,
        doc="Bcrypt-hashed password (never store plaintext)"
    )

    role = Column(
        Enum(AdminRole, name="admin_role", length=15),
        nullable=False,
        default=AdminRole.SUPER_ADMIN,
        doc="Administrative role"
    )

    def __repr__(self) -> str:
        return f"AdminUser(id={self.id!r}, username={self.username!r})"


class MongoAdminUser(BaseModel):
    """
    Admin user document stored in the admin_users collection.

    The primary key is MongoDB's ``_id``, exposed as ``id``.
    """

    collection_name: ClassVar[str] = "admin_users"

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: Optional[ObjectId] = Field(default=None, alias="_id")
    username: str = Field(..., json_schema_extra={"unique": True})
    password: str
    role: AdminRole = AdminRole.SUPER_ADMIN
    created: datetime = Field(default_factory=utc_now)
    modified: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"MongoAdminUser(id={self.id!r}, username={self.username!r})"
