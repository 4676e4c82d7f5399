"""Database dialects: engine-specific SQL generation and schema introspection."""

from db_dialects.core import DatabaseConnection, QueryBuilder, Transaction
from db_dialects.dialects import (
    DataTypeProvider,
    FunctionProvider,
    MysqlDialect,
    VendorDialect,
    create_dialect,
    detect_dialect,
)
from db_dialects.errors import (
    DialectError,
    MissingCatalogFieldError,
    UnrecognizedEnumerationValueError,
    UnsupportedByDialectError,
)
from db_dialects.models import (
    Column,
    DatabaseConfig,
    ForeignKeyConstraint,
    Index,
    ReferenceOption,
    Table,
)

__version__ = "0.1.0"

__all__ = [
    "DatabaseConfig",
    "DatabaseConnection",
    "Transaction",
    "QueryBuilder",
    "VendorDialect",
    "MysqlDialect",
    "DataTypeProvider",
    "FunctionProvider",
    "create_dialect",
    "detect_dialect",
    "Table",
    "Column",
    "ReferenceOption",
    "ForeignKeyConstraint",
    "Index",
    "DialectError",
    "UnsupportedByDialectError",
    "UnrecognizedEnumerationValueError",
    "MissingCatalogFieldError",
]
