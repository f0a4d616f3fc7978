"""
Field map assignment.

Turns a loosely-typed field map (as parsed from an HTML form) into typed
assignments against an entity descriptor. Shared by the create and update
paths of every backend; only the sink receiving the assignments differs.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Mapping

from bson import ObjectId
from bson.errors import InvalidId

from adminpanel.core.exceptions import InvalidValue
from adminpanel.database.descriptor import EntityDescriptor, FieldDescriptor, FieldKind

logger = logging.getLogger(__name__)

FieldSink = Callable[[FieldDescriptor, Any], None]

_TRUE_LABELS = frozenset({"true", "1", "on", "yes"})
_FALSE_LABELS = frozenset({"false", "0", "off", "no"})


def assign_fields(
    descriptor: EntityDescriptor,
    fields: Mapping[str, Any],
    sink: FieldSink,
) -> None:
    """
    Resolve, filter and coerce a field map, passing each assignment to ``sink``.

    For each entry:
    - the key is resolved against the descriptor (camelCase or snake_case)
    - the primary key (and any literal "id" entry) is skipped
    - empty strings are skipped; they mean "not provided", never "set to empty"
    - keys with no matching field are ignored
    - the value is coerced to the field's kind

    Args:
        descriptor: Entity descriptor to resolve keys against
        fields: External field map
        sink: Called as ``sink(field, value)`` for every accepted entry

    Raises:
        InvalidValue: If a value cannot be coerced (e.g. unknown enum label).
            Raised before the sink sees anything from later entries, and the
            callers coerce everything before writing.
    """
    for key, value in fields.items():
        if key == "id":
            continue
        if isinstance(value, str) and value == "":
            continue

        target = descriptor.field_for(key)
        if target is None:
            logger.debug(
                "Ignoring unknown field",
                extra={"entity": descriptor.name, "field": key},
            )
            continue
        if target.is_primary_key:
            continue

        sink(target, coerce_value(target, value))


def collect_fields(descriptor: EntityDescriptor, fields: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Run assign_fields into a dict keyed by native field name.

    Returns:
        Ordered mapping of native name to coerced value
    """
    values: Dict[str, Any] = {}

    def _into_dict(target: FieldDescriptor, value: Any) -> None:
        values[target.native_name] = value

    assign_fields(descriptor, fields, _into_dict)
    return values


def coerce_value(target: FieldDescriptor, value: Any) -> Any:
    """
    Coerce one external value to the type expected by ``target``.

    Enum labels are matched exactly (case-sensitive) against the constant
    names; there is no fuzzy matching and no default on a miss.

    Raises:
        InvalidValue: If the value cannot be coerced
    """
    if value is None:
        return None

    kind = target.kind

    if kind is FieldKind.ENUM:
        if target.enum_type is not None and isinstance(value, target.enum_type):
            return value
        label = str(value)
        if label not in target.enum_constants:
            raise _invalid(target, value, f"one of {', '.join(target.enum_constants)}")
        if target.enum_type is not None:
            return target.enum_type[label]
        return label

    if kind is FieldKind.BOOLEAN:
        if isinstance(value, bool):
            return value
        label = str(value).strip().lower()
        if label in _TRUE_LABELS:
            return True
        if label in _FALSE_LABELS:
            return False
        raise _invalid(target, value, "a boolean")

    if kind is FieldKind.INTEGER:
        if isinstance(value, bool):
            raise _invalid(target, value, "an integer")
        if isinstance(value, int):
            return value
        try:
            return int(str(value).strip())
        except ValueError:
            raise _invalid(target, value, "an integer") from None

    if kind is FieldKind.FLOAT:
        if isinstance(value, bool):
            raise _invalid(target, value, "a number")
        try:
            return float(value)
        except (TypeError, ValueError):
            raise _invalid(target, value, "a number") from None

    if kind is FieldKind.DATETIME:
        if isinstance(value, datetime):
            return value
        try:
            return datetime.fromisoformat(str(value).strip())
        except ValueError:
            raise _invalid(target, value, "an ISO-8601 datetime") from None

    if kind is FieldKind.OBJECT_ID:
        try:
            return value if isinstance(value, ObjectId) else ObjectId(str(value))
        except InvalidId:
            raise _invalid(target, value, "an ObjectId") from None

    if kind is FieldKind.STRING and not isinstance(value, str):
        return str(value)

    return value


def _invalid(target: FieldDescriptor, value: Any, expected: str) -> InvalidValue:
    return InvalidValue(
        f"Invalid value {value!r} for field '{target.native_name}': expected {expected}",
        field=target.native_name,
        value=value,
    )
