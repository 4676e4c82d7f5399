"""Database connection management with SQLAlchemy."""

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from db_dialects.core.transaction import Transaction
from db_dialects.models.config import DatabaseConfig

if TYPE_CHECKING:
    from db_dialects.dialects.base import VendorDialect

logger = logging.getLogger(__name__)

READ_ONLY_STATEMENTS = {
    "postgresql": "SET SESSION CHARACTERISTICS AS TRANSACTION READ ONLY",
    "mysql": "SET SESSION TRANSACTION READ ONLY",
    "mariadb": "SET SESSION TRANSACTION READ ONLY",
    "sqlite": "PRAGMA query_only = ON",
}

# Seconds to the engine's setting; MariaDB counts in seconds, the others in ms
TIMEOUT_STATEMENTS = {
    "postgresql": lambda seconds: f"SET statement_timeout = {seconds * 1000}",
    "mysql": lambda seconds: f"SET SESSION max_execution_time = {seconds * 1000}",
    "mariadb": lambda seconds: f"SET SESSION max_statement_time = {seconds}",
}


class DatabaseConnection:
    """Owns the SQLAlchemy async engine and hands out transaction handles."""

    def __init__(self, config: DatabaseConfig):
        """
        Initialize database connection.

        Args:
            config: Database configuration with connection URL
        """
        self.config = config
        self.engine: Optional[AsyncEngine] = None
        self._dialect_name = config.dialect
        self._driver = config.driver
        self._dialect: Optional["VendorDialect"] = None

    async def initialize(self) -> None:
        """Create the async engine."""
        if self.engine is not None:
            return  # Already initialized

        self.engine = create_async_engine(
            self.config.url,
            pool_pre_ping=True,  # Verify connections before using
            echo=self.config.echo_sql,
        )
        logger.info(f"Initialized {self._dialect_name} engine (driver: {self._driver})")

    async def dispose(self) -> None:
        """Dispose of the engine and cleanup resources."""
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None
            logger.info(f"Disposed {self._dialect_name} engine")

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[Transaction, None]:
        """
        Open a connection and yield a transaction handle for it.

        Yields:
            Transaction wrapping the open connection

        Raises:
            RuntimeError: If engine not initialized
        """
        if self.engine is None:
            raise RuntimeError("DatabaseConnection not initialized. Call initialize() first.")

        async with self.engine.connect() as conn:
            for statement in self.session_statements():
                await conn.execute(text(statement))

            yield Transaction(
                conn,
                database=self.config.database,
                stores_lower_case_identifiers=self.config.lower_case_table_names,
            )

    def session_statements(self) -> list[str]:
        """
        Statements run on every new connection before it is handed out.

        Read-only mode and the statement timeout are applied where the engine
        has a session setting for them.
        """
        statements = []
        if self.config.read_only and self._dialect_name in READ_ONLY_STATEMENTS:
            statements.append(READ_ONLY_STATEMENTS[self._dialect_name])
        if self.config.statement_timeout and self._dialect_name in TIMEOUT_STATEMENTS:
            statements.append(TIMEOUT_STATEMENTS[self._dialect_name](self.config.statement_timeout))
        return statements

    @property
    def dialect(self) -> "VendorDialect":
        """Dialect matching the configured database."""
        if self._dialect is None:
            from db_dialects.dialects import create_dialect

            self._dialect = create_dialect(self.config)
        return self._dialect

    @property
    def dialect_name(self) -> str:
        """Get database dialect name."""
        return self._dialect_name

    @property
    def driver(self) -> str:
        """Get database driver name."""
        return self._driver

    @property
    def is_initialized(self) -> bool:
        """Check if engine is initialized."""
        return self.engine is not None

    async def server_version(self) -> Optional[tuple[int, ...]]:
        """Numeric server version as reported when a connection is opened."""
        async with self.transaction() as transaction:
            return transaction.server_version

    async def __aenter__(self) -> "DatabaseConnection":
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.dispose()
