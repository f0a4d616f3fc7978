"""
SQLAlchemy ORM implementation of DataAccessObject.

Entities are instances of the mapped class, addressed with RawKey the
way an entity manager looks objects up by bare identity.
"""

import logging
from typing import Any, List, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from adminpanel.core.exceptions import NotFound
from adminpanel.database.descriptor import EntityDescriptor
from adminpanel.database.fields import collect_fields
from adminpanel.database.interfaces import Credentials, DataAccessObject
from adminpanel.database.keys import PrimaryKey, RawKey, coerce_scalar

logger = logging.getLogger(__name__)


class OrmDao(DataAccessObject[Any]):
    """
    Data access over a declarative ORM model.

    Each operation opens its own session and transaction. The session
    factory must be built with ``expire_on_commit=False`` (see
    core.database.create_session_maker) so returned entities stay
    readable once their session has closed.

    Attributes:
        session_maker: Async session factory (owned by the caller)
        model: Mapped class managed by this DAO
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession], model: type):
        super().__init__()
        self.session_maker = session_maker
        self.model = model

    def _build_descriptor(self) -> EntityDescriptor:
        return EntityDescriptor.from_model(self.model)

    def _attribute(self, native_name: str) -> Any:
        return getattr(self.model, native_name)

    def wrap_key(self, value: Any) -> RawKey:
        return RawKey(coerce_scalar(self.descriptor.primary_key, value))

    def unwrap_key(self, key: PrimaryKey) -> Any:
        if not isinstance(key, RawKey):
            raise TypeError(
                f"{self.entity_name} expects a RawKey, got {type(key).__name__}"
            )
        return key.value

    async def find_by_id(self, id: Any, id_is_wrapped: bool = False) -> Optional[Any]:
        key = self.key_value(id, id_is_wrapped)
        logger.debug(
            "Finding entity by id",
            extra={"entity": self.entity_name, "operation": "find_by_id", "entity_id": key},
        )
        async with self.session_maker() as session, session.begin():
            return await session.get(self.model, key)

    async def find_all(self) -> List[Optional[Any]]:
        self.descriptor.primary_key
        async with self.session_maker() as session, session.begin():
            result = await session.execute(select(self.model))
            return list(result.scalars().all())

    async def find(self, lookup_key: str) -> Optional[Credentials]:
        lookup, password = self.credential_fields()
        lookup_attr = self._attribute(lookup.native_name)

        async with self.session_maker() as session, session.begin():
            result = await session.execute(
                select(lookup_attr, self._attribute(password.native_name))
                .where(lookup_attr == lookup_key)
            )
            row = result.first()

        if row is None:
            return None
        return Credentials(username=row[0], password=row[1])

    async def save(self, fields: Mapping[str, Any]) -> Any:
        pk = self.descriptor.primary_key
        values = collect_fields(self.descriptor, fields)

        async with self.session_maker() as session, session.begin():
            entity = self.model(**values)
            session.add(entity)
            await session.flush()

            new_key = getattr(entity, pk.native_name)
            stored = await session.get(self.model, new_key, populate_existing=True)
            if stored is None:
                raise NotFound(self.entity_name, new_key)

        logger.info(
            "Entity saved",
            extra={"entity": self.entity_name, "operation": "save", "entity_id": new_key},
        )
        return stored

    async def update(self, fields: Mapping[str, Any]) -> Any:
        key = self.update_key_value(fields)
        values = collect_fields(self.descriptor, fields)

        async with self.session_maker() as session, session.begin():
            entity = await session.get(self.model, key)
            if entity is None:
                logger.warning(
                    "Update matched no entity",
                    extra={"entity": self.entity_name, "operation": "update", "entity_id": key},
                )
                raise NotFound(self.entity_name, key)

            for name, value in values.items():
                setattr(entity, name, value)
            await session.flush()
            await session.refresh(entity)

        logger.info(
            "Entity updated",
            extra={"entity": self.entity_name, "operation": "update", "entity_id": key},
        )
        return entity

    async def delete(self, id: Any, id_is_wrapped: bool = False) -> Any:
        key = self.key_value(id, id_is_wrapped)

        async with self.session_maker() as session, session.begin():
            entity = await session.get(self.model, key)
            if entity is None:
                logger.warning(
                    "Delete matched no entity",
                    extra={"entity": self.entity_name, "operation": "delete", "entity_id": key},
                )
                raise NotFound(self.entity_name, key)
            await session.delete(entity)

        logger.info(
            "Entity deleted",
            extra={"entity": self.entity_name, "operation": "delete", "entity_id": key},
        )
        return entity

    async def create_table(self) -> None:
        table = self.model.__table__
        async with self.session_maker() as session, session.begin():
            await session.run_sync(
                lambda sync_session: table.create(sync_session.connection(), checkfirst=True)
            )
        logger.info(
            "Table ensured",
            extra={"entity": self.entity_name, "operation": "create_table"},
        )
