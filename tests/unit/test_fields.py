"""
Unit tests for field map assignment.

Tests cover:
- Name resolution (camelCase and snake_case keys)
- Skipping of primary keys, empty strings and unknown keys
- Exact enum label coercion
- Scalar coercion by field kind
"""

from datetime import datetime

import pytest

from adminpanel.core.exceptions import InvalidValue
from adminpanel.database.descriptor import EntityDescriptor
from adminpanel.database.fields import assign_fields, collect_fields
from adminpanel.models import AdminRole, AdminUser, MongoAdminUser


@pytest.fixture
def admin_descriptor():
    return EntityDescriptor.from_table(AdminUser)


@pytest.fixture
def book_descriptor(book_model):
    return EntityDescriptor.from_model(book_model)


class TestAssignFields:

    def test_sink_receives_resolved_fields(self, admin_descriptor):
        """
        Test every accepted entry reaches the sink once.

        Arrange: Field map with two plain fields
        Act: Assign into a recording sink
        Assert: Sink saw both native names in order
        """
        seen = []

        assign_fields(
            admin_descriptor,
            {"username": "alice", "password": "hash"},
            lambda field, value: seen.append((field.native_name, value)),
        )

        assert seen == [("username", "alice"), ("password", "hash")]

    def test_id_entry_skipped(self, admin_descriptor):
        values = collect_fields(admin_descriptor, {"id": "5", "username": "alice"})

        assert values == {"username": "alice"}

    def test_mongo_id_skipped(self):
        descriptor = EntityDescriptor.from_document(MongoAdminUser, "admin_users")

        values = collect_fields(descriptor, {"_id": "abc", "username": "alice"})

        assert values == {"username": "alice"}

    def test_empty_string_skipped(self, admin_descriptor):
        values = collect_fields(admin_descriptor, {"username": "alice", "password": ""})

        assert values == {"username": "alice"}

    def test_unknown_key_ignored(self, admin_descriptor):
        values = collect_fields(admin_descriptor, {"username": "alice", "csrfToken": "x"})

        assert values == {"username": "alice"}

    def test_camel_case_keys_resolved(self, book_descriptor):
        values = collect_fields(book_descriptor, {"title": "Dune", "pageCount": "412"})

        assert values == {"title": "Dune", "page_count": 412}


class TestEnumCoercion:

    def test_label_to_constant(self, admin_descriptor):
        values = collect_fields(admin_descriptor, {"role": "EDITOR"})

        assert values["role"] is AdminRole.EDITOR

    def test_matches_names_not_values(self, book_descriptor, book_status):
        values = collect_fields(book_descriptor, {"status": "OUT_OF_PRINT"})

        assert values["status"] is book_status.OUT_OF_PRINT

    def test_value_is_not_a_label(self, book_descriptor):
        with pytest.raises(InvalidValue):
            collect_fields(book_descriptor, {"status": "out-of-print"})

    def test_case_sensitive(self, admin_descriptor):
        with pytest.raises(InvalidValue) as exc_info:
            collect_fields(admin_descriptor, {"role": "editor"})

        assert exc_info.value.field == "role"
        assert exc_info.value.value == "editor"
        assert "role" in str(exc_info.value)

    def test_member_accepted(self, admin_descriptor):
        values = collect_fields(admin_descriptor, {"role": AdminRole.VIEWER})

        assert values["role"] is AdminRole.VIEWER


class TestScalarCoercion:

    def test_boolean_labels(self, book_descriptor):
        assert collect_fields(book_descriptor, {"inPrint": "on"})["in_print"] is True
        assert collect_fields(book_descriptor, {"inPrint": "false"})["in_print"] is False

    def test_bad_boolean(self, book_descriptor):
        with pytest.raises(InvalidValue, match="boolean"):
            collect_fields(book_descriptor, {"inPrint": "maybe"})

    def test_bad_integer(self, book_descriptor):
        with pytest.raises(InvalidValue, match="page_count"):
            collect_fields(book_descriptor, {"pageCount": "many"})

    def test_datetime_from_iso(self, book_descriptor):
        values = collect_fields(book_descriptor, {"publishedAt": "2024-03-01T12:30:00"})

        assert values["published_at"] == datetime(2024, 3, 1, 12, 30)

    def test_bad_datetime(self, book_descriptor):
        with pytest.raises(InvalidValue, match="datetime"):
            collect_fields(book_descriptor, {"publishedAt": "yesterday"})
