"""
Entity descriptors.

An EntityDescriptor is the explicit metadata the data access layer works
from: the entity's table or collection name and, for every field, its
native and external names, value kind, key/uniqueness flags and enum
constants. Descriptors are built once per data access object from the
backend's native entity definition:

- SQLAlchemy Core ``Table`` (or anything exposing ``__table__``)
- SQLAlchemy ORM mapped class
- pydantic document model plus a collection name
"""

import enum
import types
import typing
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Tuple, Type

from bson import ObjectId
from pydantic import BaseModel
from sqlalchemy import Boolean, DateTime, Enum as SAEnum, Integer, Numeric, String, Table
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import NoInspectionAvailable

from adminpanel.core.exceptions import ConfigurationFault
from adminpanel.database.naming import camel_to_snake, snake_to_camel


class FieldKind(str, enum.Enum):
    """Backend-agnostic value kind of an entity field."""

    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    STRING = "string"
    DATETIME = "datetime"
    ENUM = "enum"
    OBJECT_ID = "object_id"
    OTHER = "other"


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Metadata for one entity field.

    Attributes:
        native_name: Name used by the backend (column, mapped attribute or document key)
        external_name: camelCase name used by forms and templates
        kind: Value kind used for coercion
        is_primary_key: Field identifies the entity
        is_unique: Backend enforces uniqueness
        enum_type: Python Enum class for ENUM fields, if one is bound
        enum_constants: Allowed constant names for ENUM fields
    """

    native_name: str
    kind: FieldKind
    is_primary_key: bool = False
    is_unique: bool = False
    enum_type: Optional[Type[enum.Enum]] = None
    enum_constants: Tuple[str, ...] = ()
    external_name: str = ""

    def __post_init__(self):
        if not self.external_name:
            object.__setattr__(self, "external_name", snake_to_camel(self.native_name))


@dataclass(frozen=True)
class EntityDescriptor:
    """Metadata for one entity type: its name and its fields in declaration order."""

    name: str
    fields: Tuple[FieldDescriptor, ...] = field(default_factory=tuple)

    @property
    def primary_key(self) -> FieldDescriptor:
        """
        The single primary-key field.

        Raises:
            ConfigurationFault: If the entity has no primary key or a composite one
        """
        keys = [f for f in self.fields if f.is_primary_key]
        if not keys:
            raise ConfigurationFault(f"No primary key defined for {self.name}")
        if len(keys) > 1:
            raise ConfigurationFault(
                f"Composite primary key on {self.name} is not supported: "
                f"{', '.join(k.native_name for k in keys)}"
            )
        return keys[0]

    def field_for(self, key: str) -> Optional[FieldDescriptor]:
        """
        Resolve an external field name (camelCase or snake_case) to its field.

        Returns:
            The matching FieldDescriptor, or None if the entity has no such field
        """
        native = camel_to_snake(key)
        for candidate in self.fields:
            if candidate.native_name == native or candidate.external_name == key:
                return candidate
        return None

    @property
    def native_names(self) -> Tuple[str, ...]:
        return tuple(f.native_name for f in self.fields)

    @classmethod
    def from_table(cls, table: Any) -> "EntityDescriptor":
        """
        Build a descriptor from a SQLAlchemy Core table.

        Accepts a ``Table`` or any object exposing one as ``__table__``
        (e.g. a declarative model class).

        Raises:
            ConfigurationFault: If no table can be resolved
        """
        table = getattr(table, "__table__", table)
        if not isinstance(table, Table):
            raise ConfigurationFault(
                f"Expected a SQLAlchemy Table, got {type(table).__name__}"
            )
        fields = tuple(_column_field(column.name, column) for column in table.columns)
        return cls(name=table.name, fields=fields)

    @classmethod
    def from_model(cls, model: type) -> "EntityDescriptor":
        """
        Build a descriptor from a SQLAlchemy ORM mapped class.

        Native names are the mapped attribute keys, which is what the ORM
        assigns to; they may differ from the underlying column names.

        Raises:
            ConfigurationFault: If the class is not mapped
        """
        try:
            mapper = sa_inspect(model)
        except NoInspectionAvailable as exc:
            raise ConfigurationFault(
                f"{getattr(model, '__name__', model)!r} is not a mapped ORM class"
            ) from exc

        fields = tuple(
            _column_field(prop.key, prop.columns[0])
            for prop in mapper.column_attrs
        )
        return cls(name=mapper.local_table.name, fields=fields)

    @classmethod
    def from_document(cls, model: Type[BaseModel], collection: str) -> "EntityDescriptor":
        """
        Build a descriptor from a pydantic document model.

        The document key of each field is its alias when one is set. The
        field stored under ``_id`` is the primary key.

        Raises:
            ConfigurationFault: If the model is not a pydantic model
        """
        if not (isinstance(model, type) and issubclass(model, BaseModel)):
            raise ConfigurationFault(
                f"Expected a pydantic model class, got {model!r}"
            )

        fields = []
        for name, info in model.model_fields.items():
            document_key = info.alias or name
            annotation = _unwrap_optional(info.annotation)
            kind, enum_type = _annotation_kind(annotation)
            extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
            fields.append(FieldDescriptor(
                native_name=document_key,
                external_name="id" if document_key == "_id" else snake_to_camel(name),
                kind=kind,
                is_primary_key=document_key == "_id",
                is_unique=bool(extra.get("unique", False)),
                enum_type=enum_type,
                enum_constants=tuple(m.name for m in enum_type) if enum_type else (),
            ))
        return cls(name=collection, fields=tuple(fields))


def _column_field(native_name: str, column: Any) -> FieldDescriptor:
    column_type = column.type
    enum_type = None
    constants: Tuple[str, ...] = ()

    # Enum subclasses String, so it must be checked first
    if isinstance(column_type, SAEnum):
        kind = FieldKind.ENUM
        enum_type = column_type.enum_class
        constants = tuple(column_type.enums)
    elif isinstance(column_type, Boolean):
        kind = FieldKind.BOOLEAN
    elif isinstance(column_type, Integer):
        kind = FieldKind.INTEGER
    elif isinstance(column_type, Numeric):
        kind = FieldKind.FLOAT
    elif isinstance(column_type, DateTime):
        kind = FieldKind.DATETIME
    elif isinstance(column_type, String):
        kind = FieldKind.STRING
    else:
        kind = FieldKind.OTHER

    return FieldDescriptor(
        native_name=native_name,
        kind=kind,
        is_primary_key=bool(column.primary_key),
        is_unique=bool(column.unique),
        enum_type=enum_type,
        enum_constants=constants,
    )


def _unwrap_optional(annotation: Any) -> Any:
    """Strip ``Optional[...]`` / ``X | None`` down to the inner type."""
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _annotation_kind(annotation: Any) -> Tuple[FieldKind, Optional[Type[enum.Enum]]]:
    if not isinstance(annotation, type):
        return FieldKind.OTHER, None
    if issubclass(annotation, enum.Enum):
        return FieldKind.ENUM, annotation
    if issubclass(annotation, ObjectId):
        return FieldKind.OBJECT_ID, None
    # bool subclasses int
    if issubclass(annotation, bool):
        return FieldKind.BOOLEAN, None
    if issubclass(annotation, int):
        return FieldKind.INTEGER, None
    if issubclass(annotation, float):
        return FieldKind.FLOAT, None
    if issubclass(annotation, datetime):
        return FieldKind.DATETIME, None
    if issubclass(annotation, str):
        return FieldKind.STRING, None
    return FieldKind.OTHER, None
