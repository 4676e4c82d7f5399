"""Unit tests for schema models and column types."""

import datetime

import pytest
from pydantic import ValidationError

from db_dialects.errors import UnrecognizedEnumerationValueError
from db_dialects.models import (
    BooleanColumnType,
    DateTimeColumnType,
    DecimalColumnType,
    ForeignKeyConstraint,
    Index,
    IntegerColumnType,
    ReferenceOption,
    Table,
    TextColumnType,
    VarCharColumnType,
)


class TestReferenceOption:
    """Delete-rule parsing from catalog text."""

    @pytest.mark.parametrize(
        "catalog_text, expected",
        [
            ("SET NULL", ReferenceOption.SET_NULL),
            ("NO ACTION", ReferenceOption.NO_ACTION),
            ("CASCADE", ReferenceOption.CASCADE),
            ("RESTRICT", ReferenceOption.RESTRICT),
            ("SET DEFAULT", ReferenceOption.SET_DEFAULT),
            ("cascade", ReferenceOption.CASCADE),
        ],
    )
    def test_from_catalog(self, catalog_text, expected):
        assert ReferenceOption.from_catalog(catalog_text) is expected

    def test_unknown_rule_fails_loudly(self):
        with pytest.raises(UnrecognizedEnumerationValueError) as exc_info:
            ReferenceOption.from_catalog("DROP EVERYTHING")

        assert exc_info.value.value == "DROP EVERYTHING"
        assert "SET_NULL" in str(exc_info.value)

    def test_sql_spelling(self):
        assert ReferenceOption.SET_NULL.sql == "SET NULL"
        assert ReferenceOption.CASCADE.sql == "CASCADE"


class TestSchemaObjects:
    """Immutability and identity of schema objects."""

    def test_table_lookup_key(self):
        table = Table(name="OrderItems")
        assert table.name_in_database_case() == "OrderItems"
        assert table.name_in_database_case(lower_case=True) == "orderitems"

    def test_tables_are_hashable_by_name(self):
        assert {Table(name="users"): 1}[Table(name="users")] == 1

    def test_foreign_key_is_frozen(self):
        fk = ForeignKeyConstraint(
            constraint_name="fk_orders_user",
            referee_table="orders",
            referee_column="user_id",
            referenced_table="users",
            referenced_column="id",
            delete_rule=ReferenceOption.CASCADE,
        )
        with pytest.raises(ValidationError):
            fk.delete_rule = ReferenceOption.RESTRICT

    def test_index_keeps_column_order(self):
        index = Index(name="idx", table_name="orders", columns=["b", "a"], unique=True)
        assert index.columns == ("b", "a")

    def test_empty_table_name_rejected(self):
        with pytest.raises(ValidationError):
            Table(name="")


class TestColumnTypes:
    """Default SQL names and literal rendering."""

    def test_sql_types(self):
        assert IntegerColumnType().sql_type() == "INT"
        assert VarCharColumnType(length=64).sql_type() == "VARCHAR(64)"
        assert TextColumnType().sql_type() == "TEXT"
        assert DecimalColumnType(precision=10, scale=2).sql_type() == "DECIMAL(10, 2)"

    def test_literals(self):
        assert IntegerColumnType().value_to_sql(7) == "7"
        assert IntegerColumnType().value_to_sql(None) == "NULL"
        assert BooleanColumnType().value_to_sql(True) == "TRUE"
        assert VarCharColumnType().value_to_sql("O'Brien") == "'O''Brien'"
        assert (
            DateTimeColumnType().value_to_sql(datetime.datetime(2024, 1, 15, 10, 30))
            == "'2024-01-15 10:30:00'"
        )
