"""Abstract column types and their default SQL rendering."""

import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ColumnType(BaseModel):
    """Base column type."""

    model_config = ConfigDict(frozen=True)

    nullable: bool = Field(default=False, description="Whether the column accepts NULL")

    def sql_type(self) -> str:
        raise NotImplementedError(f"{type(self).__name__} has no SQL type")

    def value_to_db(self, value: Any) -> Any:
        """Value as handed to the driver for a bound parameter."""
        return value

    def non_null_value_to_sql(self, value: Any) -> str:
        return str(value)

    def value_to_sql(self, value: Any) -> str:
        """Render a value as an SQL literal."""
        if value is None:
            return "NULL"
        return self.non_null_value_to_sql(value)


class IntegerColumnType(ColumnType):
    def sql_type(self) -> str:
        return "INT"

    def non_null_value_to_sql(self, value: Any) -> str:
        return str(int(value))


class LongColumnType(ColumnType):
    def sql_type(self) -> str:
        return "BIGINT"

    def non_null_value_to_sql(self, value: Any) -> str:
        return str(int(value))


class BooleanColumnType(ColumnType):
    def sql_type(self) -> str:
        return "BOOLEAN"

    def non_null_value_to_sql(self, value: Any) -> str:
        return "TRUE" if value else "FALSE"


class DecimalColumnType(ColumnType):
    precision: int = Field(..., ge=1)
    scale: int = Field(..., ge=0)

    def sql_type(self) -> str:
        return f"DECIMAL({self.precision}, {self.scale})"

    def non_null_value_to_sql(self, value: Any) -> str:
        return str(Decimal(str(value)))


class StringColumnType(ColumnType):
    """Common base of the character types."""

    def sql_type(self) -> str:
        return "VARCHAR"

    def non_null_value_to_sql(self, value: Any) -> str:
        escaped = str(value).replace("'", "''")
        return f"'{escaped}'"


class VarCharColumnType(StringColumnType):
    length: int = Field(default=255, ge=1)

    def sql_type(self) -> str:
        return f"VARCHAR({self.length})"


class TextColumnType(StringColumnType):
    def sql_type(self) -> str:
        return "TEXT"


class DateTimeColumnType(ColumnType):
    """Date and time of day.

    The SQL name depends on the server (see ``DataTypeProvider.date_time_type``);
    ``sql_type`` only gives the portable spelling.
    """

    def sql_type(self) -> str:
        return "DATETIME"

    def non_null_value_to_sql(self, value: Any) -> str:
        if isinstance(value, datetime.datetime):
            value = value.isoformat(sep=" ")
        elif isinstance(value, datetime.date):
            value = value.isoformat()
        return f"'{value}'"
