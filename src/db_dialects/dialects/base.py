"""Default dialect behaviour shared by all engines."""

import asyncio
import logging
import threading
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Mapping, Optional, Sequence, TypeVar

from sqlalchemy import inspect as sa_inspect

from db_dialects.core.query_builder import QueryBuilder
from db_dialects.core.transaction import Transaction
from db_dialects.dialects.providers import DataTypeProvider, FunctionProvider
from db_dialects.errors import MissingCatalogFieldError, UnsupportedByDialectError
from db_dialects.models.schema import (
    Column,
    ForeignKeyConstraint,
    Index,
    ReferenceOption,
    Table,
)

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")

ColumnNullability = tuple[str, bool]
ColumnKey = tuple[str, str]


def freeze(accumulator: Mapping[K, list[V]]) -> dict[K, tuple[V, ...]]:
    """Detach per-call accumulation lists from the returned result."""
    return {key: tuple(values) for key, values in accumulator.items()}


def required(row: Mapping[str, Any], field: str, query_name: str) -> Any:
    """Value of ``field`` in a catalog row; absent or NULL raises."""
    value = row.get(field)
    if value is None:
        raise MissingCatalogFieldError(field, query_name)
    return value


class VendorDialect:
    """
    Dialect with the generic SQL behaviour.

    Engines subclass this and override only what differs. Introspection
    defaults go through SQLAlchemy reflection.
    """

    default_value_expression = "DEFAULT VALUES"

    def __init__(
        self,
        name: str,
        data_type_provider: Optional[DataTypeProvider] = None,
        function_provider: Optional[FunctionProvider] = None,
    ):
        """
        Initialize dialect.

        Args:
            name: Dialect name (mysql, postgresql, ...)
            data_type_provider: Type name mapping (generic if None)
            function_provider: Function/operator rendering (generic if None)
        """
        self.name = name
        self.data_type_provider = data_type_provider or DataTypeProvider()
        self.function_provider = function_provider or FunctionProvider()
        # Held by column_constraints and existing_indices, across threads and loops
        self._introspection_lock = threading.Lock()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    @asynccontextmanager
    async def exclusive_introspection(self) -> AsyncIterator[None]:
        """
        Hold the dialect-wide introspection lock for the enclosed block.

        A contended acquire waits in a worker thread, leaving the event loop
        free. Callers on other threads, each with its own loop, exclude each
        other as well as tasks on the same loop.
        """
        lock = self._introspection_lock
        if not lock.acquire(blocking=False):
            waiter = asyncio.ensure_future(asyncio.to_thread(lock.acquire))
            try:
                await asyncio.shield(waiter)
            except asyncio.CancelledError:
                # The worker still ends up owning the lock; release it when it does
                waiter.add_done_callback(lambda _: lock.release())
                raise
        try:
            yield
        finally:
            lock.release()

    def get_database(self, transaction: Transaction) -> str:
        return transaction.database

    # ==================== Statement generation ====================

    def replace(
        self,
        table: Table,
        data: Sequence[tuple[Column, Any]],
        transaction: Transaction,
        builder: Optional[QueryBuilder] = None,
    ) -> str:
        raise UnsupportedByDialectError(self.name, "REPLACE")

    def insert(
        self,
        ignore: bool,
        table: Table,
        columns: Sequence[Column],
        expr: str,
        transaction: Transaction,
    ) -> str:
        """
        Generate an INSERT statement.

        Args:
            ignore: Suppress errors on constraint violations
            table: Target table
            columns: Columns receiving values (empty for default values)
            expr: Values expression (``VALUES (...)`` or a SELECT)
            transaction: Active transaction, used for quoting

        Returns:
            INSERT statement text
        """
        if ignore:
            raise UnsupportedByDialectError(self.name, "INSERT IGNORE")

        if columns:
            column_list = ", ".join(transaction.identity(column) for column in columns)
            return f"INSERT INTO {transaction.identity(table)} ({column_list}) {expr}"
        return f"INSERT INTO {transaction.identity(table)} {self.default_value_expression}"

    def delete(
        self,
        ignore: bool,
        table: Table,
        where: Optional[str],
        transaction: Transaction,
        limit: Optional[int] = None,
    ) -> str:
        if ignore:
            raise UnsupportedByDialectError(self.name, "DELETE IGNORE")
        if limit is not None:
            raise UnsupportedByDialectError(self.name, "DELETE ... LIMIT")

        statement = f"DELETE FROM {transaction.identity(table)}"
        if where:
            statement += f" WHERE {where}"
        return statement

    def drop_index(self, table_name: str, index_name: str) -> str:
        return f"DROP INDEX {index_name}"

    # ==================== Introspection ====================

    async def table_columns(
        self, transaction: Transaction, *tables: Table
    ) -> dict[Table, tuple[ColumnNullability, ...]]:
        """
        Column names and nullability for each requested table.

        Args:
            transaction: Active transaction
            *tables: Tables to describe; none gives an empty result

        Returns:
            Mapping of table to ``(column_name, is_nullable)`` pairs
        """
        if not tables:
            return {}

        schema = transaction.schema

        def get_column_data(sync_conn):
            inspector = sa_inspect(sync_conn)
            columns: dict[Table, list[ColumnNullability]] = {}
            for table in tables:
                if not inspector.has_table(table.name, schema=schema):
                    continue
                for col_data in inspector.get_columns(table.name, schema=schema):
                    columns.setdefault(table, []).append(
                        (col_data["name"], bool(col_data["nullable"]))
                    )
            return freeze(columns)

        return await transaction.run_sync(get_column_data)

    async def column_constraints(
        self, transaction: Transaction, *tables: Table
    ) -> dict[ColumnKey, tuple[ForeignKeyConstraint, ...]]:
        """
        Foreign keys keyed by ``(referee_table, referee_column)``.

        Args:
            transaction: Active transaction
            *tables: Referee tables; none means every table of the schema

        Returns:
            Mapping of referee column to the constraints it holds
        """
        schema = transaction.schema

        def get_fk_data(sync_conn):
            inspector = sa_inspect(sync_conn)
            table_names = [table.name for table in tables] or inspector.get_table_names(schema=schema)

            constraints: dict[ColumnKey, list[ForeignKeyConstraint]] = {}
            for table_name in table_names:
                if not inspector.has_table(table_name, schema=schema):
                    continue
                for fk in inspector.get_foreign_keys(table_name, schema=schema):
                    ondelete = (fk.get("options") or {}).get("ondelete")
                    delete_rule = (
                        ReferenceOption.from_catalog(ondelete) if ondelete else ReferenceOption.NO_ACTION
                    )
                    constraint_name = fk.get("name") or f"fk_{table_name}_auto"
                    for referee_column, referenced_column in zip(
                        fk["constrained_columns"], fk["referred_columns"]
                    ):
                        constraints.setdefault((table_name, referee_column), []).append(
                            ForeignKeyConstraint(
                                constraint_name=constraint_name,
                                referee_table=table_name,
                                referee_column=referee_column,
                                referenced_table=fk["referred_table"],
                                referenced_column=referenced_column,
                                delete_rule=delete_rule,
                            )
                        )
            return freeze(constraints)

        async with self.exclusive_introspection():
            return await transaction.run_sync(get_fk_data)

    async def existing_indices(
        self, transaction: Transaction, *tables: Table
    ) -> dict[Table, tuple[Index, ...]]:
        """
        User-defined indices of each requested table, primary key excluded.

        Args:
            transaction: Active transaction
            *tables: Tables to inspect

        Returns:
            Mapping of table to its indices
        """
        if not tables:
            return {}

        schema = transaction.schema

        def get_index_data(sync_conn):
            inspector = sa_inspect(sync_conn)
            indices: dict[Table, list[Index]] = {}
            for table in tables:
                if not inspector.has_table(table.name, schema=schema):
                    continue
                for idx_data in inspector.get_indexes(table.name, schema=schema):
                    column_names = idx_data["column_names"]
                    # Reflection reports expression elements as None
                    if not column_names or None in column_names:
                        logger.debug(f"Skipping expression index {idx_data['name']} on {table.name}")
                        continue
                    indices.setdefault(table, []).append(
                        Index(
                            name=idx_data["name"],
                            table_name=table.name,
                            columns=tuple(transaction.quote_if_necessary(name) for name in column_names),
                            unique=bool(idx_data.get("unique", False)),
                        )
                    )
            return freeze(indices)

        async with self.exclusive_introspection():
            return await transaction.run_sync(get_index_data)
