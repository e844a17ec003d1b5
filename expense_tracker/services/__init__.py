"""Services package."""

from expense_tracker.services.auth import (
    CredentialError,
    CredentialErrorKind,
    CredentialHashingError,
    CredentialStorageError,
    CredentialStore,
    HashingError,
    PasswordHasher,
)
from expense_tracker.services.storage import (
    ConnectionError,
    DuplicateError,
    ExpenseStorageInterface,
    SchemaError,
    SQLiteClient,
    SQLiteExpenseStorage,
    SQLiteUserStorage,
    StorageError,
    UserStorageInterface,
    ensure_schema,
)

__all__ = [
    # Auth services
    "CredentialError",
    "CredentialErrorKind",
    "CredentialHashingError",
    "CredentialStorageError",
    "CredentialStore",
    "HashingError",
    "PasswordHasher",
    # Storage services
    "ConnectionError",
    "DuplicateError",
    "ExpenseStorageInterface",
    "SchemaError",
    "SQLiteClient",
    "SQLiteExpenseStorage",
    "SQLiteUserStorage",
    "StorageError",
    "UserStorageInterface",
    "ensure_schema",
]
