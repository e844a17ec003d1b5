"""
Storage Services Package

Provides abstract interfaces and the SQLite implementation for data storage,
plus the schema manager that prepares the database file on startup.
"""

from expense_tracker.services.storage.interface import (
    ConnectionError,
    DuplicateError,
    ExpenseStorageInterface,
    SchemaError,
    StorageError,
    UserStorageInterface,
)
from expense_tracker.services.storage.sqlite import (
    SQLiteClient,
    SQLiteExpenseStorage,
    SQLiteUserStorage,
)
from expense_tracker.services.storage.schema import ensure_schema

__all__ = [
    # Interfaces
    "ExpenseStorageInterface",
    "UserStorageInterface",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "SchemaError",
    "StorageError",
    # SQLite implementation
    "SQLiteClient",
    "SQLiteExpenseStorage",
    "SQLiteUserStorage",
    "ensure_schema",
]
