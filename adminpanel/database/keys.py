"""
Primary key representations.

Each backend addresses entities with its own identifier shape:

- ``RawKey``: a bare scalar used directly in equality lookups (ORM backend)
- ``BoundKey``: a scalar bound to the table that owns it (Core backend)
- ``DocumentKey``: a MongoDB ObjectId (document backend)

A data access object produces and accepts only its own variant. Moving
between variants always goes through an explicit ``wrap_key`` call.
"""

from dataclasses import dataclass
from typing import Any, Union

from bson import ObjectId
from bson.errors import InvalidId

from adminpanel.core.exceptions import InvalidValue
from adminpanel.database.descriptor import FieldDescriptor, FieldKind


@dataclass(frozen=True)
class RawKey:
    value: Any

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class BoundKey:
    """A key value bound to the table (``owner``) it identifies a row of."""

    value: Any
    owner: str

    def __str__(self) -> str:
        return f"{self.owner}:{self.value}"


@dataclass(frozen=True)
class DocumentKey:
    value: ObjectId

    def __str__(self) -> str:
        return str(self.value)


PrimaryKey = Union[RawKey, BoundKey, DocumentKey]


def coerce_scalar(field: FieldDescriptor, value: Any) -> Any:
    """
    Convert a raw key value to the key field's type.

    Key values frequently arrive as text (URL segments, hidden form
    inputs), so integer and ObjectId keys are parsed here.

    Raises:
        InvalidValue: If the value cannot represent a key of this kind
    """
    if value is None or value == "":
        raise InvalidValue(
            f"Missing value for primary key '{field.native_name}'",
            field=field.native_name,
            value=value,
        )

    if field.kind is FieldKind.INTEGER:
        if isinstance(value, bool):
            raise InvalidValue(
                f"Primary key '{field.native_name}' must be an integer, got {value!r}",
                field=field.native_name,
                value=value,
            )
        try:
            return int(str(value).strip())
        except ValueError:
            raise InvalidValue(
                f"Primary key '{field.native_name}' must be an integer, got {value!r}",
                field=field.native_name,
                value=value,
            ) from None

    if field.kind is FieldKind.OBJECT_ID:
        if isinstance(value, ObjectId):
            return value
        try:
            return ObjectId(str(value))
        except (InvalidId, TypeError):
            raise InvalidValue(
                f"Primary key '{field.native_name}' must be an ObjectId, got {value!r}",
                field=field.native_name,
                value=value,
            ) from None

    return value


def is_primary_key(value: Any) -> bool:
    return isinstance(value, (RawKey, BoundKey, DocumentKey))
