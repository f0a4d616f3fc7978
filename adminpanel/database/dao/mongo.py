"""
MongoDB implementation of DataAccessObject (motor).

Entities are instances of a pydantic document model; documents are
addressed with DocumentKey. Enum values are stored by constant name.
"""

import enum
import logging
from typing import Any, Dict, List, Mapping, Optional, Type

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pydantic import BaseModel, ValidationError
from pymongo import ReturnDocument

from adminpanel.core.exceptions import InvalidValue, NotFound
from adminpanel.database.descriptor import EntityDescriptor
from adminpanel.database.fields import collect_fields
from adminpanel.database.interfaces import Credentials, DataAccessObject
from adminpanel.database.keys import DocumentKey, PrimaryKey, coerce_scalar

logger = logging.getLogger(__name__)


def _to_bson(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Replace enum members with their constant names."""
    return {
        key: value.name if isinstance(value, enum.Enum) else value
        for key, value in values.items()
    }


class MongoDao(DataAccessObject[BaseModel]):
    """
    Data access over one MongoDB collection.

    Writes are single-document atomic operations; the re-read after an
    update is folded into ``find_one_and_update``.

    Attributes:
        database: Motor database handle (owned by the caller)
        model: Pydantic document model; its ``_id`` field is the primary key
        collection_name: Collection name (model's ``collection_name`` or
            its lowercased class name when not given)
    """

    def __init__(
        self,
        database: AsyncIOMotorDatabase,
        model: Type[BaseModel],
        collection: Optional[str] = None,
    ):
        super().__init__()
        self.database = database
        self.model = model
        self.collection_name = (
            collection
            or getattr(model, "collection_name", None)
            or getattr(model, "__name__", str(model)).lower()
        )

    @property
    def collection(self) -> AsyncIOMotorCollection:
        return self.database[self.collection_name]

    def _build_descriptor(self) -> EntityDescriptor:
        return EntityDescriptor.from_document(self.model, self.collection_name)

    def wrap_key(self, value: Any) -> DocumentKey:
        return DocumentKey(coerce_scalar(self.descriptor.primary_key, value))

    def unwrap_key(self, key: PrimaryKey) -> Any:
        if not isinstance(key, DocumentKey):
            raise TypeError(
                f"{self.entity_name} expects a DocumentKey, got {type(key).__name__}"
            )
        return key.value

    def _from_bson(self, document: Mapping[str, Any]) -> Dict[str, Any]:
        """Turn stored enum constant names back into enum members."""
        restored = dict(document)
        for field in self.descriptor.fields:
            value = restored.get(field.native_name)
            if field.enum_type is not None and isinstance(value, str) and value in field.enum_constants:
                restored[field.native_name] = field.enum_type[value]
        return restored

    def _to_entity(self, document: Optional[Mapping[str, Any]]) -> Optional[BaseModel]:
        if document is None:
            return None
        try:
            return self.model.model_validate(self._from_bson(document))
        except ValidationError as exc:
            logger.warning(
                "Skipping malformed document",
                extra={
                    "entity": self.entity_name,
                    "entity_id": document.get("_id"),
                    "errors": exc.error_count(),
                },
            )
            return None

    def _invalid_document(self, exc: ValidationError) -> InvalidValue:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        return InvalidValue(
            f"Invalid {self.entity_name} document: {first.get('msg')} ({field})",
            field=field or None,
            value=first.get("input"),
        )

    def _new_document(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        """Validate a new document against the model so its defaults are applied."""
        try:
            document = self.model(**values).model_dump(by_alias=True)
        except ValidationError as exc:
            raise self._invalid_document(exc) from exc
        document.pop(self.descriptor.primary_key.native_name, None)
        return _to_bson(document)

    def _check_update(self, current: Mapping[str, Any], values: Mapping[str, Any]) -> None:
        """Validate the document as it would read after applying ``values``."""
        merged = self._from_bson(current)
        merged.update(values)
        try:
            self.model.model_validate(merged)
        except ValidationError as exc:
            raise self._invalid_document(exc) from exc

    async def find_by_id(self, id: Any, id_is_wrapped: bool = False) -> Optional[BaseModel]:
        key = self.key_value(id, id_is_wrapped)
        logger.debug(
            "Finding document by id",
            extra={"entity": self.entity_name, "operation": "find_by_id", "entity_id": key},
        )
        return self._to_entity(await self.collection.find_one({"_id": key}))

    async def find_all(self) -> List[Optional[BaseModel]]:
        self.descriptor.primary_key
        documents = await self.collection.find().to_list(length=None)
        return [self._to_entity(document) for document in documents]

    async def find(self, lookup_key: str) -> Optional[Credentials]:
        lookup, password = self.credential_fields()
        document = await self.collection.find_one(
            {lookup.native_name: lookup_key},
            {lookup.native_name: 1, password.native_name: 1},
        )
        if document is None:
            return None
        return Credentials(
            username=document[lookup.native_name],
            password=document[password.native_name],
        )

    async def save(self, fields: Mapping[str, Any]) -> BaseModel:
        self.descriptor.primary_key
        document = self._new_document(collect_fields(self.descriptor, fields))

        result = await self.collection.insert_one(document)
        new_key = result.inserted_id

        entity = self._to_entity(await self.collection.find_one({"_id": new_key}))
        if entity is None:
            raise NotFound(self.entity_name, new_key)

        logger.info(
            "Document saved",
            extra={"entity": self.entity_name, "operation": "save", "entity_id": new_key},
        )
        return entity

    async def update(self, fields: Mapping[str, Any]) -> BaseModel:
        key = self.update_key_value(fields)
        values = collect_fields(self.descriptor, fields)

        document = await self.collection.find_one({"_id": key})
        if document is not None and values:
            # Nothing is written unless the updated document still validates
            self._check_update(document, values)
            document = await self.collection.find_one_and_update(
                {"_id": key},
                {"$set": _to_bson(values)},
                return_document=ReturnDocument.AFTER,
            )

        if document is None:
            logger.warning(
                "Update matched no document",
                extra={"entity": self.entity_name, "operation": "update", "entity_id": key},
            )
            raise NotFound(self.entity_name, key)

        entity = self._to_entity(document)
        if entity is None:
            raise NotFound(self.entity_name, key)

        logger.info(
            "Document updated",
            extra={"entity": self.entity_name, "operation": "update", "entity_id": key},
        )
        return entity

    async def delete(self, id: Any, id_is_wrapped: bool = False) -> Optional[BaseModel]:
        key = self.key_value(id, id_is_wrapped)

        document = await self.collection.find_one_and_delete({"_id": key})
        if document is None:
            logger.warning(
                "Delete matched no document",
                extra={"entity": self.entity_name, "operation": "delete", "entity_id": key},
            )
            raise NotFound(self.entity_name, key)

        logger.info(
            "Document deleted",
            extra={"entity": self.entity_name, "operation": "delete", "entity_id": key},
        )
        # A malformed document is still removed; it comes back as None
        return self._to_entity(document)

    async def create_table(self) -> None:
        existing = await self.database.list_collection_names()
        if self.collection_name not in existing:
            await self.database.create_collection(self.collection_name)

        for field in self.descriptor.fields:
            if field.is_unique and not field.is_primary_key:
                await self.collection.create_index(field.native_name, unique=True)

        logger.info(
            "Collection ensured",
            extra={"entity": self.entity_name, "operation": "create_table"},
        )
