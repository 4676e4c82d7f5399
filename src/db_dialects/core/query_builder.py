"""Argument registration and rendering of expression fragments."""

from typing import TYPE_CHECKING, Any, Optional, Protocol, Union, runtime_checkable

from db_dialects.models.column_types import ColumnType, StringColumnType
from db_dialects.models.schema import Column

if TYPE_CHECKING:
    from db_dialects.core.transaction import Transaction


@runtime_checkable
class Expression(Protocol):
    """Anything that renders itself to SQL through a builder."""

    def to_sql(self, builder: "QueryBuilder") -> str: ...


ExpressionLike = Union[Expression, str]


class QueryBuilder:
    """
    Collects bound arguments while statement text is assembled.

    In prepared mode every registered argument becomes a named placeholder
    (``:arg_0``, ``:arg_1`` ...) usable with ``sqlalchemy.text``; otherwise
    values are rendered inline as literals.
    """

    def __init__(self, prepared: bool = True, transaction: Optional["Transaction"] = None):
        self.prepared = prepared
        self.transaction = transaction
        self.args: list[tuple[ColumnType, Any]] = []

    def register_argument(self, column_type: ColumnType, value: Any) -> str:
        if not self.prepared:
            return column_type.value_to_sql(value)
        placeholder = f"arg_{len(self.args)}"
        self.args.append((column_type, value))
        return f":{placeholder}"

    @property
    def params(self) -> dict[str, Any]:
        """Bound parameters keyed by placeholder name."""
        return {
            f"arg_{position}": column_type.value_to_db(value)
            for position, (column_type, value) in enumerate(self.args)
        }

    def identity(self, name: str) -> str:
        if self.transaction is None:
            return name
        return self.transaction.quote_if_necessary(name)

    def full_identity(self, column: Column) -> str:
        if self.transaction is None:
            return f"{column.table.name}.{column.name}"
        return self.transaction.full_identity(column)

    def render(self, expr: ExpressionLike) -> str:
        """Render an expression; plain strings are taken as SQL fragments."""
        if isinstance(expr, str):
            return expr
        return expr.to_sql(self)


class Op:
    """Boolean predicate."""

    def to_sql(self, builder: QueryBuilder) -> str:
        raise NotImplementedError


class LikeOp(Op):
    def __init__(self, expr: ExpressionLike, pattern: str):
        self.expr = expr
        self.pattern = pattern

    def to_sql(self, builder: QueryBuilder) -> str:
        literal = StringColumnType().value_to_sql(self.pattern)
        return f"{builder.render(self.expr)} LIKE {literal}"
