"""Explicit handle on the connection a dialect works against."""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Iterable, Mapping, Optional, Union

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection
from sqlalchemy.sql.elements import TextClause

from db_dialects.errors import DialectError
from db_dialects.models.schema import Column, Table

logger = logging.getLogger(__name__)


class Transaction:
    """
    Active connection passed into every introspection and generation call.

    Wraps an SQLAlchemy ``AsyncConnection``; anything exposing ``execute``,
    ``run_sync`` and a SQLAlchemy ``dialect`` works.
    """

    def __init__(
        self,
        conn: AsyncConnection,
        database: Optional[str] = None,
        stores_lower_case_identifiers: bool = False,
    ):
        """
        Initialize transaction handle.

        Args:
            conn: Open async connection
            database: Schema/database to introspect (connection default if None)
            stores_lower_case_identifiers: Server folds table names to lower case
        """
        self.conn = conn
        self._database = database
        self.stores_lower_case_identifiers = stores_lower_case_identifiers

    @property
    def schema(self) -> Optional[str]:
        """Explicitly requested schema/database, if any."""
        return self._database

    @property
    def database(self) -> str:
        """Name of the schema/database catalog queries are scoped to."""
        name = self.schema or getattr(self.conn.dialect, "default_schema_name", None)
        if not name:
            raise DialectError("No database selected for this transaction")
        return name

    @property
    def server_version(self) -> Optional[tuple[int, ...]]:
        """Server version as fetched by the driver when the connection opened."""
        version = getattr(self.conn.dialect, "server_version_info", None)
        if not version:
            return None
        return tuple(part for part in version if isinstance(part, int))

    @asynccontextmanager
    async def catalog_query(
        self,
        query_name: str,
        statement: Union[str, TextClause],
        params: Optional[Mapping[str, Any]] = None,
    ) -> AsyncIterator[Iterable[Mapping[str, Any]]]:
        """
        Run a read-only catalog query and yield its rows as mappings.

        The result is closed on every exit path.

        Args:
            query_name: Label used in log records and errors
            statement: SQL text or text() clause
            params: Bound parameters
        """
        if isinstance(statement, str):
            statement = text(statement)

        logger.debug(f"Running catalog query {query_name} on {self._database or 'default database'}")
        result = await self.conn.execute(statement, dict(params or {}))
        try:
            yield result.mappings()
        finally:
            result.close()

    async def run_sync(self, fn, *args, **kwargs):
        """Run a synchronous function (e.g. SQLAlchemy reflection) on the connection."""
        return await self.conn.run_sync(fn, *args, **kwargs)

    def quote_if_necessary(self, identifier: str) -> str:
        """Quote an identifier only when the server requires it."""
        return self.conn.dialect.identifier_preparer.quote(identifier)

    def identity(self, obj: Union[Table, Column, str]) -> str:
        """Quoted name of a table or column."""
        if isinstance(obj, (Table, Column)):
            return self.quote_if_necessary(obj.name)
        return self.quote_if_necessary(obj)

    def full_identity(self, column: Column) -> str:
        """Quoted ``table.column`` reference."""
        return f"{self.identity(column.table)}.{self.identity(column)}"
