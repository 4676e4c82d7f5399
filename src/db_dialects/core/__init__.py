"""Connection handling and statement assembly shared by all dialects."""

from .connection import DatabaseConnection
from .query_builder import Expression, LikeOp, Op, QueryBuilder
from .transaction import Transaction

__all__ = [
    "DatabaseConnection",
    "Transaction",
    "QueryBuilder",
    "Expression",
    "Op",
    "LikeOp",
]
