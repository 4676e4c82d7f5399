"""Pytest configuration and shared fixtures for dialect tests"""

import asyncio
import os
from typing import Any, AsyncGenerator, Callable, Optional

import pytest
from dotenv import load_dotenv
from sqlalchemy.dialects import mysql

from db_dialects.core import DatabaseConnection, Transaction
from db_dialects.dialects import MysqlDialect, VendorDialect
from db_dialects.models import DatabaseConfig, IntegerColumnType, Table, VarCharColumnType

# Load environment variables
load_dotenv()


# ==================== Fake catalog ====================


class FakeResult:
    """Result double tracking whether it was closed."""

    def __init__(self, rows: list[dict[str, Any]]):
        self._rows = rows
        self.closed = False

    def mappings(self):
        return iter(self._rows)

    def close(self) -> None:
        self.closed = True


class FakeCatalogConnection:
    """
    Async connection double answering catalog queries from scripted rows.

    ``responses`` maps a marker found in the SQL text to the rows (or the
    exception) returned for it. Each execute yields to the event loop once, or
    sleeps for ``delay`` seconds, so concurrent calls interleave.
    """

    def __init__(
        self,
        responses: Optional[dict[str, Any]] = None,
        server_version_info: Optional[tuple] = (8, 0, 32),
        default_schema_name: Optional[str] = "shop",
        delay: float = 0,
    ):
        self.dialect = mysql.dialect()
        self.dialect.server_version_info = server_version_info
        self.dialect.default_schema_name = default_schema_name
        self.responses = responses or {}
        self.executed: list[tuple[str, dict[str, Any]]] = []
        self.results: list[FakeResult] = []
        self.sync_conn = object()
        self.in_flight = 0
        self.max_in_flight = 0
        self.delay = delay

    async def execute(self, statement, parameters=None):
        sql = str(statement)
        self.executed.append((sql, parameters or {}))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1
        for marker, rows in self.responses.items():
            if marker in sql:
                if isinstance(rows, Exception):
                    raise rows
                if callable(rows):
                    rows = rows(parameters or {})
                result = FakeResult([dict(row) for row in rows])
                self.results.append(result)
                return result
        raise AssertionError(f"Unexpected query: {sql}")

    async def run_sync(self, fn, *args, **kwargs):
        await asyncio.sleep(0)
        return fn(self.sync_conn, *args, **kwargs)


@pytest.fixture
def fake_connection_factory() -> Callable[..., FakeCatalogConnection]:
    """Build fake connections with scripted catalog rows"""
    return FakeCatalogConnection


@pytest.fixture
def transaction_factory() -> Callable[..., Transaction]:
    """Build transactions over fake connections"""

    def factory(
        responses: Optional[dict[str, Any]] = None,
        server_version_info: Optional[tuple] = (8, 0, 32),
        database: Optional[str] = None,
        lower_case: bool = False,
        delay: float = 0,
    ) -> Transaction:
        conn = FakeCatalogConnection(responses, server_version_info, delay=delay)
        return Transaction(conn, database=database, stores_lower_case_identifiers=lower_case)

    return factory


@pytest.fixture
def transaction(transaction_factory) -> Transaction:
    """Transaction on an empty fake MySQL 8.0 catalog"""
    return transaction_factory()


# ==================== Dialects and schema ====================


@pytest.fixture
def mysql_dialect() -> MysqlDialect:
    """MySQL dialect instance"""
    return MysqlDialect()


@pytest.fixture
def generic_dialect() -> VendorDialect:
    """Dialect with the generic behaviour"""
    return VendorDialect("sqlite")


@pytest.fixture
def users() -> Table:
    return Table(name="users")


@pytest.fixture
def orders() -> Table:
    return Table(name="orders")


@pytest.fixture
def email_column(users: Table):
    return users.column("email", VarCharColumnType(length=120))


@pytest.fixture
def amount_column(orders: Table):
    return orders.column("amount", IntegerColumnType())


# ==================== Live MySQL ====================


@pytest.fixture(scope="session")
def mysql_database_url() -> Optional[str]:
    """MySQL test database URL from environment"""
    return os.getenv("MYSQL_TEST_DATABASE_URL")


@pytest.fixture
async def mysql_connection(
    mysql_database_url: Optional[str],
) -> AsyncGenerator[DatabaseConnection, None]:
    """MySQL database connection with proper cleanup"""
    if not mysql_database_url:
        pytest.skip("MYSQL_TEST_DATABASE_URL not set in environment")
    connection = DatabaseConnection(DatabaseConfig(url=mysql_database_url, read_only=False))
    await connection.initialize()
    try:
        yield connection
    finally:
        await connection.dispose()
