"""
Authentication Services Package

bcrypt password hashing and the credential store built on top of it.
"""

from expense_tracker.services.auth.hashing import HashingError, PasswordHasher
from expense_tracker.services.auth.credentials import (
    CredentialError,
    CredentialErrorKind,
    CredentialHashingError,
    CredentialStorageError,
    CredentialStore,
)

__all__ = [
    "CredentialError",
    "CredentialErrorKind",
    "CredentialHashingError",
    "CredentialStorageError",
    "CredentialStore",
    "HashingError",
    "PasswordHasher",
]
