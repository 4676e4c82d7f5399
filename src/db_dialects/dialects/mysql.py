"""MySQL dialect: information_schema introspection and MySQL statement forms."""

import logging
from enum import Enum
from typing import Any, Optional, Sequence, Union

from sqlalchemy import bindparam, text

from db_dialects.core.query_builder import ExpressionLike, Op, QueryBuilder
from db_dialects.core.transaction import Transaction
from db_dialects.dialects.base import (
    ColumnKey,
    ColumnNullability,
    VendorDialect,
    freeze,
    required,
)
from db_dialects.dialects.providers import DataTypeProvider, FunctionProvider, MatchMode
from db_dialects.errors import UnrecognizedEnumerationValueError
from db_dialects.models.column_types import ColumnType, StringColumnType
from db_dialects.models.schema import (
    Column,
    ForeignKeyConstraint,
    Index,
    ReferenceOption,
    Table,
)

logger = logging.getLogger(__name__)

# First server version with fractional seconds in DATETIME
FRACTIONAL_DATETIME_VERSION = (5, 6)


def is_fraction_date_time_supported(transaction: Transaction) -> bool:
    """Whether the server accepts ``DATETIME(6)``."""
    version = transaction.server_version
    if not version or len(version) < 2:
        return False
    return version[:2] >= FRACTIONAL_DATETIME_VERSION


class MysqlDataTypeProvider(DataTypeProvider):
    def date_time_type(self, transaction: Transaction) -> str:
        return "DATETIME(6)" if is_fraction_date_time_supported(transaction) else "DATETIME"


class CharColumnType(StringColumnType):
    """Target of string casts; MySQL cannot CAST to VARCHAR."""

    def sql_type(self) -> str:
        return "CHAR"


class MysqlMatchMode(Enum):
    STRICT = "IN BOOLEAN MODE"
    NATURAL_LANGUAGE = "IN NATURAL LANGUAGE MODE"

    def mode(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str) -> "MysqlMatchMode":
        token = value.strip().replace(" ", "_").upper()
        try:
            return cls[token]
        except KeyError:
            raise UnrecognizedEnumerationValueError(
                cls.__name__, value, [member.name for member in cls]
            ) from None


class MatchOp(Op):
    """``MATCH(expr) AGAINST ('pattern' mode)`` full-text predicate.

    The pattern is written into the statement as a literal, never bound;
    callers are responsible for what they put in it.
    """

    def __init__(self, expr: ExpressionLike, pattern: str, mode: MatchMode):
        self.expr = expr
        self.pattern = pattern
        self.mode = mode

    def to_sql(self, builder: QueryBuilder) -> str:
        literal = StringColumnType().value_to_sql(self.pattern)
        return f"MATCH({builder.render(self.expr)}) AGAINST ({literal} {self.mode.mode()})"


class MysqlFunctionProvider(FunctionProvider):
    def cast(self, expr: ExpressionLike, column_type: ColumnType, builder: QueryBuilder) -> str:
        if isinstance(column_type, StringColumnType):
            column_type = CharColumnType()
        return super().cast(expr, column_type, builder)

    def random(self, seed: Optional[int] = None) -> str:
        return f"RAND({'' if seed is None else int(seed)})"

    def match(
        self,
        expr: ExpressionLike,
        pattern: str,
        mode: Union[MatchMode, str, None] = None,
    ) -> Op:
        if mode is None:
            mode = MysqlMatchMode.STRICT
        elif isinstance(mode, str):
            mode = MysqlMatchMode.parse(mode)
        return MatchOp(expr, pattern, mode)


class MysqlDialect(VendorDialect):
    """MySQL (and MariaDB) dialect."""

    default_value_expression = "() VALUES ()"

    def __init__(self, name: str = "mysql"):
        super().__init__(name, MysqlDataTypeProvider(), MysqlFunctionProvider())

    def is_fraction_date_time_supported(self, transaction: Transaction) -> bool:
        return is_fraction_date_time_supported(transaction)

    # ==================== Statement generation ====================

    def replace(
        self,
        table: Table,
        data: Sequence[tuple[Column, Any]],
        transaction: Transaction,
        builder: Optional[QueryBuilder] = None,
    ) -> str:
        """
        Generate a REPLACE statement with bound values.

        Args:
            table: Target table
            data: ``(column, value)`` pairs in column-list order
            transaction: Active transaction, used for quoting
            builder: Builder collecting the arguments (a prepared one if None)

        Returns:
            REPLACE statement text with ``:arg_n`` placeholders
        """
        builder = builder or QueryBuilder(prepared=True, transaction=transaction)
        columns = ", ".join(transaction.identity(column) for column, _ in data)
        values = ", ".join(builder.register_argument(column.column_type, value) for column, value in data)
        return f"REPLACE INTO {transaction.identity(table)} ({columns}) VALUES ({values})"

    def insert(
        self,
        ignore: bool,
        table: Table,
        columns: Sequence[Column],
        expr: str,
        transaction: Transaction,
    ) -> str:
        statement = super().insert(False, table, columns, expr, transaction)
        return statement.replace("INSERT", "INSERT IGNORE", 1) if ignore else statement

    def delete(
        self,
        ignore: bool,
        table: Table,
        where: Optional[str],
        transaction: Transaction,
        limit: Optional[int] = None,
    ) -> str:
        statement = super().delete(False, table, where, transaction)
        if limit is not None:
            statement += f" LIMIT {int(limit)}"
        return statement.replace("DELETE", "DELETE IGNORE", 1) if ignore else statement

    def drop_index(self, table_name: str, index_name: str) -> str:
        return f"ALTER TABLE {table_name} DROP INDEX {index_name}"

    # ==================== Introspection ====================

    async def table_columns(
        self, transaction: Transaction, *tables: Table
    ) -> dict[Table, tuple[ColumnNullability, ...]]:
        """Column nullability from INFORMATION_SCHEMA.COLUMNS."""
        query = text("""
            SELECT DISTINCT
                TABLE_NAME AS table_name,
                COLUMN_NAME AS column_name,
                IS_NULLABLE AS is_nullable
            FROM INFORMATION_SCHEMA.COLUMNS
            WHERE TABLE_SCHEMA = :database
        """)

        by_name = {table.name: table for table in tables}
        columns: dict[Table, list[ColumnNullability]] = {}

        async with transaction.catalog_query(
            "table_columns", query, {"database": self.get_database(transaction)}
        ) as rows:
            for row in rows:
                table = by_name.get(required(row, "table_name", "table_columns"))
                if table is None:
                    continue
                column_name = required(row, "column_name", "table_columns")
                is_nullable = str(required(row, "is_nullable", "table_columns")).upper() == "YES"
                columns.setdefault(table, []).append((column_name, is_nullable))

        return freeze(columns)

    async def column_constraints(
        self, transaction: Transaction, *tables: Table
    ) -> dict[ColumnKey, tuple[ForeignKeyConstraint, ...]]:
        """Foreign keys from REFERENTIAL_CONSTRAINTS joined with KEY_COLUMN_USAGE."""
        table_names = [table.name for table in tables]
        params: dict[str, Any] = {"database": self.get_database(transaction)}

        sql = """
            SELECT
                rc.CONSTRAINT_NAME AS constraint_name,
                ku.TABLE_NAME AS table_name,
                ku.COLUMN_NAME AS column_name,
                ku.REFERENCED_TABLE_NAME AS referenced_table_name,
                ku.REFERENCED_COLUMN_NAME AS referenced_column_name,
                rc.DELETE_RULE AS delete_rule
            FROM INFORMATION_SCHEMA.REFERENTIAL_CONSTRAINTS rc
                INNER JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE ku
                    ON ku.TABLE_SCHEMA = rc.CONSTRAINT_SCHEMA
                    AND rc.CONSTRAINT_NAME = ku.CONSTRAINT_NAME
            WHERE ku.TABLE_SCHEMA = :database
        """
        if table_names:
            sql += " AND ku.TABLE_NAME IN :table_names"
            query = text(sql).bindparams(bindparam("table_names", expanding=True))
            params["table_names"] = table_names
        else:
            query = text(sql)

        constraints: dict[ColumnKey, list[ForeignKeyConstraint]] = {}

        async with self.exclusive_introspection():
            async with transaction.catalog_query("column_constraints", query, params) as rows:
                for row in rows:
                    referee_table = required(row, "table_name", "column_constraints")
                    if table_names and referee_table not in table_names:
                        logger.debug(f"Skipping foreign key row for unrequested table {referee_table}")
                        continue
                    referee_column = required(row, "column_name", "column_constraints")
                    constraints.setdefault((referee_table, referee_column), []).append(
                        ForeignKeyConstraint(
                            constraint_name=required(row, "constraint_name", "column_constraints"),
                            referee_table=referee_table,
                            referee_column=referee_column,
                            referenced_table=required(row, "referenced_table_name", "column_constraints"),
                            referenced_column=required(row, "referenced_column_name", "column_constraints"),
                            delete_rule=ReferenceOption.from_catalog(
                                required(row, "delete_rule", "column_constraints")
                            ),
                        )
                    )

        logger.debug(f"Found foreign keys on {len(constraints)} columns")
        return freeze(constraints)

    async def existing_indices(
        self, transaction: Transaction, *tables: Table
    ) -> dict[Table, tuple[Index, ...]]:
        """
        Indices from INFORMATION_SCHEMA.STATISTICS.

        The primary key is left out, and so are the non-unique single-column
        indices MySQL creates to back a foreign key.
        """
        # Single-column FK indices only: kcu.COLUMN_NAME is compared with the
        # whole comma-joined column list.
        query = text("""
            SELECT DISTINCT ind.* FROM (
                SELECT
                    TABLE_NAME AS table_name,
                    INDEX_NAME AS index_name,
                    GROUP_CONCAT(COLUMN_NAME ORDER BY SEQ_IN_INDEX) AS index_columns,
                    NON_UNIQUE AS non_unique
                FROM INFORMATION_SCHEMA.STATISTICS
                WHERE TABLE_SCHEMA = :database AND INDEX_NAME <> 'PRIMARY'
                GROUP BY 1, 2, 4) ind
            LEFT JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE kcu
                ON kcu.TABLE_NAME = ind.table_name
                AND kcu.COLUMN_NAME = ind.index_columns
                AND kcu.TABLE_SCHEMA = :database
                AND kcu.REFERENCED_TABLE_NAME IS NOT NULL
            WHERE kcu.COLUMN_NAME IS NULL OR ind.non_unique = 0
        """)

        lower_case = transaction.stores_lower_case_identifiers
        by_name = {table.name_in_database_case(lower_case): table for table in tables}
        indices: dict[Table, list[Index]] = {}

        async with self.exclusive_introspection():
            async with transaction.catalog_query(
                "existing_indices", query, {"database": self.get_database(transaction)}
            ) as rows:
                for row in rows:
                    table_name = required(row, "table_name", "existing_indices")
                    table = by_name.get(table_name)
                    if table is None:
                        continue
                    index_columns = str(required(row, "index_columns", "existing_indices"))
                    indices.setdefault(table, []).append(
                        Index(
                            name=required(row, "index_name", "existing_indices"),
                            table_name=table_name,
                            columns=tuple(
                                transaction.quote_if_necessary(name) for name in index_columns.split(",")
                            ),
                            unique=int(required(row, "non_unique", "existing_indices")) == 0,
                        )
                    )

        logger.debug(f"Found indices on {len(indices)} tables")
        return freeze(indices)
