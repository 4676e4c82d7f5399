"""Exception hierarchy for dialect operations.

Database errors raised while running catalog queries are SQLAlchemy
exceptions and are propagated unchanged.
"""

from typing import Any, Optional


class DialectError(Exception):
    """Base class for errors raised by this package."""


class UnsupportedByDialectError(DialectError, NotImplementedError):
    """Statement form that has no SQL on the current dialect."""

    def __init__(self, dialect_name: str, feature: str):
        self.dialect_name = dialect_name
        self.feature = feature
        super().__init__(f"{feature} is not supported by dialect '{dialect_name}'")


class UnrecognizedEnumerationValueError(DialectError, ValueError):
    """Catalog or caller text that matches no member of an enumeration."""

    def __init__(self, enum_name: str, value: Any, allowed: Optional[list[str]] = None):
        self.enum_name = enum_name
        self.value = value
        message = f"Unrecognized {enum_name} value: {value!r}"
        if allowed:
            message += f". Expected one of: {', '.join(allowed)}"
        super().__init__(message)


class MissingCatalogFieldError(DialectError, LookupError):
    """A catalog row is missing a value the introspection relies on."""

    def __init__(self, field: str, query_name: str):
        self.field = field
        self.query_name = query_name
        super().__init__(f"Catalog query '{query_name}' returned no value for {field}")
