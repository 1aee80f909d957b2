"""Tests for schema payload models."""

import pytest

from dbview.schema.models import Column, ColumnType, Relationship, SchemaSnapshot, Table


class TestTable:
    def test_columns_keep_server_order(self):
        table = Table.model_validate({
            "name": "users",
            "columns": [
                {"name": "id", "type": "INT"},
                {"name": "name", "type": "VARCHAR"},
                {"name": "email", "type": "VARCHAR"},
            ],
        })

        assert table.get_column_names() == ["id", "name", "email"]

    def test_bare_string_columns_are_normalized(self):
        table = Table.model_validate({"name": "tags", "columns": ["id", "label"]})

        assert table.columns == [
            Column(name="id", type="VARCHAR"),
            Column(name="label", type="VARCHAR"),
        ]

    def test_empty_column_type_defaults_to_varchar(self):
        table = Table.model_validate({"name": "t", "columns": [{"name": "a", "type": ""}]})
        assert table.columns[0].type == "VARCHAR"

    def test_null_columns(self):
        table = Table.model_validate({"name": "t", "columns": None})
        assert table.columns == []

    def test_extra_keys_are_ignored(self):
        table = Table.model_validate({"name": "t", "columns": [], "rows": [{"id": 1}]})
        assert not hasattr(table, "rows")

    def test_key_columns(self):
        assert Column(name="id").looks_like_key
        assert Column(name="user_id").looks_like_key
        assert not Column(name="email").looks_like_key


class TestSnapshot:
    def test_null_lists_are_empty(self):
        snapshot = SchemaSnapshot.model_validate({"tables": None, "relationships": None})

        assert snapshot.tables == []
        assert snapshot.relationships == []

    def test_duplicate_relationships_are_kept(self):
        rel = {"source_table": "a", "target_table": "b", "source_column": "b_id"}
        snapshot = SchemaSnapshot.model_validate({"tables": [], "relationships": [rel, rel]})

        assert len(snapshot.relationships) == 2

    def test_get_table(self, snapshot):
        assert snapshot.get_table("orders").name == "orders"
        assert snapshot.get_table("missing") is None

    def test_get_table_names(self, snapshot):
        assert snapshot.get_table_names() == ["users", "orders", "products", "reviews"]

    def test_relationship_natural_key(self):
        rel = Relationship(source_table="orders", target_table="users", source_column="user_id")
        assert rel.natural_key == ("orders", "users", "user_id")


class TestColumnType:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("VARCHAR", ColumnType.VARCHAR),
            ("text", ColumnType.VARCHAR),
            ("integer", ColumnType.INT),
            ("Int", ColumnType.INT),
            ("decimal", ColumnType.DECIMAL),
            ("real", ColumnType.DECIMAL),
            ("boolean", ColumnType.BOOLEAN),
            ("bool", ColumnType.BOOLEAN),
        ],
    )
    def test_parse_aliases(self, name, expected):
        assert ColumnType.parse(name) == expected

    def test_parse_passthrough(self):
        assert ColumnType.parse(ColumnType.INT) is ColumnType.INT

    def test_parse_unsupported(self):
        with pytest.raises(ValueError) as exc_info:
            ColumnType.parse("blob")
        assert "blob" in str(exc_info.value)
