"""
Integration tests for OrmDao (SQLAlchemy ORM) against in-memory SQLite.

Entities come back as detached model instances; these tests also check
that they remain readable after their session has closed.
"""

import asyncio

import pytest

from adminpanel.core.database import create_session_maker
from adminpanel.core.exceptions import ConfigurationFault, InvalidValue, NotFound
from adminpanel.database.dao import OrmDao
from adminpanel.database.keys import BoundKey, RawKey
from adminpanel.models import AdminRole


class TestSaveAndFind:

    async def test_save_returns_model_instance(self, orm_book_dao, book_model, book_status):
        book = await orm_book_dao.save({"title": "Dune", "pageCount": "412", "inPrint": "off"})

        assert isinstance(book, book_model)
        assert book.id is not None
        assert book.page_count == 412
        assert book.in_print is False
        assert book.status is book_status.DRAFT

    async def test_find_by_raw_and_wrapped_key(self, orm_book_dao):
        book = await orm_book_dao.save({"title": "Dune"})

        by_raw = await orm_book_dao.find_by_id(str(book.id))
        by_key = await orm_book_dao.find_by_id(RawKey(book.id), id_is_wrapped=True)

        assert by_raw.title == "Dune"
        assert by_key.id == book.id

    async def test_find_unknown_returns_none(self, orm_book_dao):
        assert await orm_book_dao.find_by_id(404) is None

    async def test_find_all(self, orm_book_dao):
        await orm_book_dao.save({"title": "Dune"})
        await orm_book_dao.save({"title": "Emma"})

        books = await orm_book_dao.find_all()

        assert sorted(book.title for book in books) == ["Dune", "Emma"]

    async def test_generated_ids_unique(self, orm_book_dao):
        books = [await orm_book_dao.save({"title": f"Book {n}"}) for n in range(5)]

        assert len({book.id for book in books}) == 5


class TestKeyVariants:

    def test_wrap_key(self, orm_book_dao):
        assert orm_book_dao.wrap_key("3") == RawKey(3)

    async def test_bound_key_rejected(self, orm_book_dao):
        with pytest.raises(TypeError, match="RawKey"):
            await orm_book_dao.find_by_id(BoundKey(1, owner="books"), id_is_wrapped=True)

    async def test_wrapped_key_without_flag_rejected(self, orm_book_dao):
        with pytest.raises(TypeError):
            await orm_book_dao.delete(RawKey(1))


class TestUpdate:

    async def test_partial_update(self, orm_book_dao, book_status):
        book = await orm_book_dao.save({"title": "Dune"})

        updated = await orm_book_dao.update({"id": book.id, "status": "PUBLISHED"})

        assert updated.status is book_status.PUBLISHED
        assert updated.title == "Dune"

    async def test_update_persists(self, orm_book_dao):
        book = await orm_book_dao.save({"title": "Dune"})

        await orm_book_dao.update({"id": str(book.id), "title": "Dune Messiah"})

        assert (await orm_book_dao.find_by_id(book.id)).title == "Dune Messiah"

    async def test_invalid_enum_rejected(self, orm_book_dao, book_status):
        book = await orm_book_dao.save({"title": "Dune"})

        with pytest.raises(InvalidValue):
            await orm_book_dao.update({"id": book.id, "status": "published"})

        assert (await orm_book_dao.find_by_id(book.id)).status is book_status.DRAFT

    async def test_unknown_id(self, orm_book_dao):
        with pytest.raises(NotFound):
            await orm_book_dao.update({"id": 404, "title": "Dune"})

    async def test_missing_id(self, orm_book_dao):
        with pytest.raises(InvalidValue):
            await orm_book_dao.update({"title": "Dune"})

    async def test_modified_timestamp_refreshed(self, orm_admin_dao):
        admin = await orm_admin_dao.save({"username": "alice", "password": "hash"})

        updated = await orm_admin_dao.update({"id": admin.id, "role": "VIEWER"})

        assert updated.role is AdminRole.VIEWER
        assert updated.modified >= admin.modified


class TestDelete:

    async def test_delete_returns_entity(self, orm_book_dao):
        book = await orm_book_dao.save({"title": "Dune"})

        deleted = await orm_book_dao.delete(book.id)

        assert deleted.title == "Dune"
        assert await orm_book_dao.find_by_id(book.id) is None

    async def test_delete_unknown(self, orm_book_dao):
        with pytest.raises(NotFound):
            await orm_book_dao.delete(404)


class TestCredentialsAndSchema:

    async def test_find(self, orm_admin_dao):
        await orm_admin_dao.save({"username": "alice", "password": "hash"})

        credentials = await orm_admin_dao.find("alice")

        assert credentials.username == "alice"
        assert credentials.password == "hash"
        assert await orm_admin_dao.find("bob") is None

    async def test_create_table_idempotent(self, orm_admin_dao):
        await orm_admin_dao.create_table()
        await orm_admin_dao.create_table()

        assert await orm_admin_dao.find_all() == []

    async def test_unmapped_class(self, session_maker):
        class NotAModel:
            pass

        dao = OrmDao(session_maker, NotAModel)

        with pytest.raises(ConfigurationFault):
            await dao.find_all()


class TestAtomicity:

    async def test_unknown_enum_label_writes_nothing(self, orm_book_dao):
        await orm_book_dao.save({"title": "Dune"})

        with pytest.raises(InvalidValue):
            await orm_book_dao.save({"title": "Emma", "status": "LOST"})

        assert [book.title for book in await orm_book_dao.find_all()] == ["Dune"]

    async def test_concurrent_saves_get_distinct_ids(self, file_engine, book_model):
        dao = OrmDao(create_session_maker(file_engine), book_model)

        books = await asyncio.gather(
            *(dao.save({"title": f"Book {n}"}) for n in range(10))
        )

        assert len({book.id for book in books}) == 10
        assert len(await dao.find_all()) == 10
