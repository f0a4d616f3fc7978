"""
Generic data access layer.

Provides one DataAccessObject contract with an implementation per storage
backend, plus the descriptor, key and field-map helpers they share.
"""

from adminpanel.database.descriptor import EntityDescriptor, FieldDescriptor, FieldKind
from adminpanel.database.factory import create_dao
from adminpanel.database.fields import assign_fields, collect_fields
from adminpanel.database.interfaces import Credentials, DataAccessObject
from adminpanel.database.keys import BoundKey, DocumentKey, PrimaryKey, RawKey

__all__ = [
    "DataAccessObject",
    "Credentials",
    "create_dao",
    "EntityDescriptor",
    "FieldDescriptor",
    "FieldKind",
    "assign_fields",
    "collect_fields",
    "PrimaryKey",
    "RawKey",
    "BoundKey",
    "DocumentKey",
]
