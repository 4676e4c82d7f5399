"""Pydantic models for configuration, column types and schema objects."""

from .column_types import (
    BooleanColumnType,
    ColumnType,
    DateTimeColumnType,
    DecimalColumnType,
    IntegerColumnType,
    LongColumnType,
    StringColumnType,
    TextColumnType,
    VarCharColumnType,
)
from .config import DatabaseConfig
from .schema import Column, ForeignKeyConstraint, Index, ReferenceOption, Table

__all__ = [
    "DatabaseConfig",
    "ColumnType",
    "IntegerColumnType",
    "LongColumnType",
    "BooleanColumnType",
    "DecimalColumnType",
    "StringColumnType",
    "VarCharColumnType",
    "TextColumnType",
    "DateTimeColumnType",
    "Table",
    "Column",
    "ReferenceOption",
    "ForeignKeyConstraint",
    "Index",
]
