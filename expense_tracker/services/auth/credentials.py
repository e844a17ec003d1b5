"""
Credential Store

Registration and authentication on top of the raw user storage.

GUARANTEES:
- Plaintext passwords are hashed before they reach the store and are
  never logged
- "Unknown user" and "wrong password" look exactly the same to callers
- Storage failures and hashing failures are reported as different
  exception classes, so the UI can say "try again later" for one and
  "internal error" for the other

NOT HANDLED HERE: password complexity. The signup flow checks the
policy before calling add_user().
"""

from enum import Enum
from typing import Optional

import structlog

from expense_tracker.models.user import UserIdentity
from expense_tracker.services.auth.hashing import HashingError, PasswordHasher
from expense_tracker.services.storage import StorageError, UserStorageInterface


logger = structlog.get_logger(__name__)


class CredentialErrorKind(str, Enum):
    """Which part of registration failed."""
    STORAGE = "storage"
    HASHING = "hashing"


class CredentialError(Exception):
    """Base exception for registration failures."""

    kind: CredentialErrorKind

    def __init__(self, message: str, cause: Optional[Exception] = None):
        self.cause = cause
        super().__init__(message)


class CredentialStorageError(CredentialError):
    """The store refused the user row (including a duplicate username)."""
    kind = CredentialErrorKind.STORAGE


class CredentialHashingError(CredentialError):
    """bcrypt failed to hash the password."""
    kind = CredentialErrorKind.HASHING


class CredentialStore:
    """
    Registers and authenticates users.

    The store owns the hasher; nothing outside this class ever sees a hash.
    """

    def __init__(
        self,
        user_storage: UserStorageInterface,
        hasher: Optional[PasswordHasher] = None,
    ):
        self._users = user_storage
        self._hasher = hasher or PasswordHasher()

    def is_username_unique(self, name: str) -> bool:
        """
        True iff no user has exactly this username.

        Raises:
            StorageError: If the lookup fails
        """
        return not self._users.exists(name)

    def add_user(self, username: str, plaintext_password: str) -> int:
        """
        Hash the password and insert the user.

        Returns:
            The new user's id

        Raises:
            CredentialHashingError: If bcrypt fails
            CredentialStorageError: If the insert fails, including a
                                    username taken since the pre-check
        """
        try:
            password_hash = self._hasher.hash(plaintext_password)
        except HashingError as e:
            raise CredentialHashingError(
                f"Could not hash password for {username}: {e}", cause=e
            ) from e

        try:
            return self._users.insert(username, password_hash)
        except StorageError as e:
            raise CredentialStorageError(
                f"Could not store user {username}: {e}", cause=e
            ) from e

    def authenticate(
        self,
        username: str,
        plaintext_password: str,
    ) -> Optional[UserIdentity]:
        """
        Check a username/password pair.

        Returns:
            The identity on an exact match, None otherwise. None is returned
            both for an unknown username and for a wrong password.

        Raises:
            StorageError: If the lookup fails
        """
        user = self._users.get_by_username(username)
        if user is None:
            return None

        try:
            matched = self._hasher.verify(plaintext_password, user.password_hash)
        except HashingError as e:
            # Fail closed
            logger.warning(
                "password_verification_error",
                username=username,
                error=str(e),
            )
            return None

        return user.identity() if matched else None

    def delete_user(self, username: str) -> None:
        """
        Remove a user. Used for cleanup; no-op if the user doesn't exist.

        Raises:
            StorageError: If the delete fails
        """
        self._users.delete(username)
