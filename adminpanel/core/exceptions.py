"""
Error taxonomy for the data access layer.

Backend failures (connectivity, constraint violations, transaction
errors) are deliberately absent: SQLAlchemyError and PyMongoError
propagate unchanged to the caller.
"""

from typing import Any, Optional


class PanelError(Exception):
    """Base class for all admin panel errors."""


class ConfigurationFault(PanelError):
    """
    The registered entity cannot be used.

    Raised when an entity descriptor cannot be resolved or the entity
    has no discoverable primary key. Detected at the first operation,
    not at registration time.
    """


class InvalidValue(PanelError, ValueError):
    """
    A supplied value cannot be coerced to the target field's type.

    Attributes:
        field: Name of the offending field (None when not field-specific)
        value: The rejected value
    """

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.field = field
        self.value = value


class NotFound(PanelError, LookupError):
    """
    A write or post-write re-read addressed a key with no matching entity.

    Attributes:
        entity: Table or collection name
        key: The primary key value that matched nothing
    """

    def __init__(self, entity: str, key: Any):
        super().__init__(f"No {entity} entity with primary key {key!r}")
        self.entity = entity
        self.key = key
