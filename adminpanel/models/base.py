"""
Base models and mixins for SQLAlchemy ORM.

Provides the declarative base shared by every panel-owned table, a
timestamp mixin and common serialization helpers.
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Column, DateTime
from sqlalchemy.orm import declarative_base


# SQLAlchemy declarative base for all ORM models
Base = declarative_base()


def utc_now() -> datetime:
    """Current UTC time as an aware datetime."""
    return datetime.now(timezone.utc)


class TimestampMixin:
    """
    Mixin that adds created and modified timestamp columns.

    Defaults are applied client-side so Core inserts and ORM flushes
    behave the same on every dialect.

    Attributes:
        created: When the record was created (never updated)
        modified: When the record was last updated (refreshed on every UPDATE)
    """

    created = Column(
        DateTime,
        nullable=False,
        default=utc_now,
        doc="UTC timestamp when record was created"
    )

    modified = Column(
        DateTime,
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
        doc="UTC timestamp when record was last updated"
    )


class ModelMixin:
    """
    Mixin providing common model utilities.

    Adds helper methods for serialization and representation.
    """

    def to_dict(self) -> dict[str, Any]:
        """
        Convert model instance to dictionary keyed by column name.

        Note:
            Only includes columns, not relationships.
        """
        return {
            column.name: getattr(self, column.key)
            for column in self.__table__.columns
        }

    def __repr__(self) -> str:
        attrs = ", ".join(
            f"{key}={value!r}"
            for key, value in self.to_dict().items()
            if key in ["id", "name", "title", "username"]  # Key identifying fields
        )
        return f"{self.__class__.__name__}({attrs})"
