"""Database dialects for specific database engines."""

from typing import Union

from sqlalchemy.engine.url import make_url

from .base import VendorDialect
from .mysql import MysqlDialect
from .providers import DataTypeProvider, FunctionProvider, MatchMode
from ..models.config import DatabaseConfig

__all__ = [
    "VendorDialect",
    "MysqlDialect",
    "DataTypeProvider",
    "FunctionProvider",
    "MatchMode",
    "create_dialect",
    "detect_dialect",
]


def detect_dialect(url: str) -> str:
    """
    Detect database dialect from connection URL.

    Args:
        url: Database connection URL

    Returns:
        Dialect name (mysql, mariadb, postgresql, sqlite)

    Raises:
        ValueError: If dialect cannot be detected
    """
    try:
        parsed_url = make_url(url)
        # Extract base dialect (e.g., "mysql" from "mysql+aiomysql")
        return parsed_url.drivername.split("+")[0]
    except Exception as e:
        raise ValueError(f"Failed to detect dialect from URL: {e}")


def create_dialect(source: Union[DatabaseConfig, str]) -> VendorDialect:
    """
    Factory function to create the dialect for a database.

    Args:
        source: Database configuration or dialect name

    Returns:
        Dialect instance

    Raises:
        ValueError: If database type is not supported
    """
    dialect = source.dialect if isinstance(source, DatabaseConfig) else source

    if dialect in ("mysql", "mariadb"):
        return MysqlDialect(dialect)
    if dialect in ("postgresql", "sqlite"):
        return VendorDialect(dialect)

    raise ValueError(
        f"Unsupported database dialect: {dialect}. "
        "Supported dialects: mysql, mariadb, postgresql, sqlite"
    )
