"""Default type and function rendering shared by dialects."""

from typing import TYPE_CHECKING, Optional, Protocol, Union

from db_dialects.core.query_builder import ExpressionLike, LikeOp, Op, QueryBuilder
from db_dialects.models.column_types import (
    BooleanColumnType,
    ColumnType,
    DateTimeColumnType,
    IntegerColumnType,
    LongColumnType,
    TextColumnType,
)

if TYPE_CHECKING:
    from db_dialects.core.transaction import Transaction


class MatchMode(Protocol):
    """Full-text matching mode of a dialect."""

    def mode(self) -> str: ...


class DataTypeProvider:
    """Maps abstract column types to SQL type names."""

    def integer_type(self) -> str:
        return "INT"

    def long_type(self) -> str:
        return "BIGINT"

    def boolean_type(self) -> str:
        return "BOOLEAN"

    def text_type(self) -> str:
        return "TEXT"

    def date_time_type(self, transaction: "Transaction") -> str:
        return "TIMESTAMP"

    def sql_type(self, column_type: ColumnType, transaction: "Transaction") -> str:
        """SQL type used when defining a column of ``column_type``."""
        if isinstance(column_type, DateTimeColumnType):
            return self.date_time_type(transaction)
        if isinstance(column_type, TextColumnType):
            return self.text_type()
        if isinstance(column_type, BooleanColumnType):
            return self.boolean_type()
        if isinstance(column_type, LongColumnType):
            return self.long_type()
        if isinstance(column_type, IntegerColumnType):
            return self.integer_type()
        return column_type.sql_type()


class FunctionProvider:
    """Renders functions and operators whose syntax differs between engines."""

    def cast(self, expr: ExpressionLike, column_type: ColumnType, builder: QueryBuilder) -> str:
        return f"CAST({builder.render(expr)} AS {column_type.sql_type()})"

    def random(self, seed: Optional[int] = None) -> str:
        return f"RANDOM({'' if seed is None else int(seed)})"

    def match(
        self,
        expr: ExpressionLike,
        pattern: str,
        mode: Union[MatchMode, str, None] = None,
    ) -> Op:
        """Pattern predicate; engines without full-text search fall back to LIKE."""
        return LikeOp(expr, pattern)
