"""
SQLAlchemy Core implementation of DataAccessObject.

Entities are plain dicts keyed by column name. Rows are addressed with
BoundKey, a key value bound to its owning table.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import Column, Table, delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from adminpanel.core.exceptions import NotFound
from adminpanel.database.descriptor import EntityDescriptor
from adminpanel.database.fields import collect_fields
from adminpanel.database.interfaces import Credentials, DataAccessObject
from adminpanel.database.keys import BoundKey, PrimaryKey, coerce_scalar

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


class SqlDao(DataAccessObject[Row]):
    """
    Data access over a SQLAlchemy Core table.

    Every operation runs inside its own ``engine.begin()`` block, so
    coerce-write-reread sequences commit or roll back as a unit.

    Attributes:
        engine: Async engine the table lives in (owned by the caller)
        table_source: ``Table`` or declarative class exposing ``__table__``
    """

    def __init__(self, engine: AsyncEngine, table: Any):
        super().__init__()
        self.engine = engine
        self.table_source = table

    def _build_descriptor(self) -> EntityDescriptor:
        return EntityDescriptor.from_table(self.table_source)

    @property
    def table(self) -> Table:
        return getattr(self.table_source, "__table__", self.table_source)

    def _column(self, native_name: str) -> Column:
        for column in self.table.columns:
            if column.name == native_name:
                return column
        raise KeyError(native_name)

    def _pk_column(self) -> Column:
        return self._column(self.descriptor.primary_key.native_name)

    def _bind_values(self, values: Mapping[str, Any]) -> Dict[Column, Any]:
        return {self._column(name): value for name, value in values.items()}

    def wrap_key(self, value: Any) -> BoundKey:
        return BoundKey(coerce_scalar(self.descriptor.primary_key, value), owner=self.entity_name)

    def unwrap_key(self, key: PrimaryKey) -> Any:
        if not isinstance(key, BoundKey):
            raise TypeError(
                f"{self.entity_name} expects a BoundKey, got {type(key).__name__}"
            )
        if key.owner != self.entity_name:
            raise TypeError(
                f"Key bound to '{key.owner}' cannot address rows of '{self.entity_name}'"
            )
        return key.value

    async def _select_one(self, conn: AsyncConnection, key: Any) -> Optional[Row]:
        result = await conn.execute(
            select(self.table).where(self._pk_column() == key)
        )
        row = result.mappings().first()
        return dict(row) if row is not None else None

    async def find_by_id(self, id: Any, id_is_wrapped: bool = False) -> Optional[Row]:
        key = self.key_value(id, id_is_wrapped)
        logger.debug(
            "Finding entity by id",
            extra={"entity": self.entity_name, "operation": "find_by_id", "entity_id": key},
        )
        async with self.engine.begin() as conn:
            return await self._select_one(conn, key)

    async def find_all(self) -> List[Optional[Row]]:
        # Surfaces a missing primary key even though it is not used here
        self.descriptor.primary_key
        async with self.engine.begin() as conn:
            result = await conn.execute(select(self.table))
            return [dict(row) for row in result.mappings().all()]

    async def find(self, lookup_key: str) -> Optional[Credentials]:
        lookup, password = self.credential_fields()
        lookup_column = self._column(lookup.native_name)
        password_column = self._column(password.native_name)

        async with self.engine.begin() as conn:
            result = await conn.execute(
                select(lookup_column, password_column)
                .where(lookup_column == lookup_key)
                .distinct()
            )
            row = result.first()

        if row is None:
            return None
        return Credentials(username=row[0], password=row[1])

    async def save(self, fields: Mapping[str, Any]) -> Row:
        # Resolve the key and coerce every value before touching the database
        self.descriptor.primary_key
        values = collect_fields(self.descriptor, fields)

        async with self.engine.begin() as conn:
            stmt = insert(self.table)
            if values:
                stmt = stmt.values(self._bind_values(values))
            result = await conn.execute(stmt)
            new_key = result.inserted_primary_key[0]

            entity = await self._select_one(conn, new_key)
            if entity is None:
                raise NotFound(self.entity_name, new_key)

        logger.info(
            "Entity saved",
            extra={"entity": self.entity_name, "operation": "save", "entity_id": new_key},
        )
        return entity

    async def update(self, fields: Mapping[str, Any]) -> Row:
        key = self.update_key_value(fields)
        values = collect_fields(self.descriptor, fields)

        async with self.engine.begin() as conn:
            if values:
                result = await conn.execute(
                    update(self.table)
                    .where(self._pk_column() == key)
                    .values(self._bind_values(values))
                )
                if result.rowcount == 0:
                    logger.warning(
                        "Update matched no rows",
                        extra={"entity": self.entity_name, "operation": "update", "entity_id": key},
                    )
                    raise NotFound(self.entity_name, key)

            entity = await self._select_one(conn, key)
            if entity is None:
                raise NotFound(self.entity_name, key)

        logger.info(
            "Entity updated",
            extra={"entity": self.entity_name, "operation": "update", "entity_id": key},
        )
        return entity

    async def delete(self, id: Any, id_is_wrapped: bool = False) -> Row:
        key = self.key_value(id, id_is_wrapped)

        async with self.engine.begin() as conn:
            entity = await self._select_one(conn, key)
            if entity is None:
                logger.warning(
                    "Delete matched no rows",
                    extra={"entity": self.entity_name, "operation": "delete", "entity_id": key},
                )
                raise NotFound(self.entity_name, key)
            await conn.execute(delete(self.table).where(self._pk_column() == key))

        logger.info(
            "Entity deleted",
            extra={"entity": self.entity_name, "operation": "delete", "entity_id": key},
        )
        return entity

    async def create_table(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(self.table.create, checkfirst=True)
        logger.info(
            "Table ensured",
            extra={"entity": self.entity_name, "operation": "create_table"},
        )
