"""Schema objects produced and consumed by dialects."""

from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from db_dialects.errors import UnrecognizedEnumerationValueError
from db_dialects.models.column_types import ColumnType

if TYPE_CHECKING:
    from db_dialects.core.query_builder import QueryBuilder


class Table(BaseModel):
    """A relation identified by its name as stored in the database."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Table name")

    def name_in_database_case(self, lower_case: bool = False) -> str:
        """Key used to match catalog rows against this table."""
        return self.name.lower() if lower_case else self.name

    def column(self, name: str, column_type: ColumnType) -> "Column":
        return Column(table=self, name=name, column_type=column_type)


class Column(BaseModel):
    """A column reference; renders as a qualified identifier."""

    model_config = ConfigDict(frozen=True)

    table: Table
    name: str = Field(..., min_length=1)
    column_type: ColumnType

    def to_sql(self, builder: "QueryBuilder") -> str:
        return builder.full_identity(self)


class ReferenceOption(str, Enum):
    """Referential action of a foreign key."""

    CASCADE = "CASCADE"
    SET_NULL = "SET_NULL"
    RESTRICT = "RESTRICT"
    NO_ACTION = "NO_ACTION"
    SET_DEFAULT = "SET_DEFAULT"

    @classmethod
    def from_catalog(cls, value: str) -> "ReferenceOption":
        """Parse catalog text such as ``SET NULL``; unknown values raise."""
        token = value.strip().replace(" ", "_").upper()
        try:
            return cls[token]
        except KeyError:
            raise UnrecognizedEnumerationValueError(
                cls.__name__, value, [member.name for member in cls]
            ) from None

    @property
    def sql(self) -> str:
        return self.value.replace("_", " ")


class ForeignKeyConstraint(BaseModel):
    """Foreign key from a referee column to a referenced column."""

    model_config = ConfigDict(frozen=True)

    constraint_name: str = Field(..., description="Constraint name")
    referee_table: str = Field(..., description="Table holding the foreign key")
    referee_column: str = Field(..., description="Column holding the foreign key")
    referenced_table: str = Field(..., description="Target table")
    referenced_column: str = Field(..., description="Target column")
    delete_rule: ReferenceOption = Field(..., description="ON DELETE action")


class Index(BaseModel):
    """An index with its columns in index order."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Index name")
    table_name: str = Field(..., description="Indexed table")
    columns: tuple[str, ...] = Field(..., description="Column identifiers in index order")
    unique: bool = Field(default=False, description="Whether index enforces uniqueness")
