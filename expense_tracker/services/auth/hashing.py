"""
Password Hashing using bcrypt

DESIGN DECISION: bcrypt because:
1. Salted per password, the salt lives inside the hash string
2. Adaptive - the work factor can be raised as hardware gets faster
3. Verification re-derives the hash, nothing is ever decrypted

bcrypt only looks at the first 72 bytes of a password. Current bcrypt
releases reject longer inputs; that surfaces here as a HashingError.
"""

from typing import Optional

import bcrypt

from expense_tracker.config import get_settings


class HashingError(Exception):
    """The hashing primitive rejected its input or its parameters."""
    pass


class PasswordHasher:
    """Thin wrapper around bcrypt with our error type."""

    def __init__(self, rounds: Optional[int] = None):
        """
        Args:
            rounds: bcrypt work factor. Defaults to the configured value.
                    Not validated here; bcrypt itself rejects bad values
                    at hash time.
        """
        self._rounds = rounds if rounds is not None else get_settings().security.bcrypt_rounds

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash(self, plaintext: str) -> str:
        """
        Hash a password.

        Raises:
            HashingError: If bcrypt rejects the cost or the password
        """
        try:
            salt = bcrypt.gensalt(rounds=self._rounds)
            hashed = bcrypt.hashpw(plaintext.encode("utf-8"), salt)
        except (ValueError, TypeError) as e:
            raise HashingError(f"Failed to hash password: {e}") from e
        return hashed.decode("utf-8")

    def verify(self, plaintext: str, hashed: str) -> bool:
        """
        Check a password against a stored hash.

        Raises:
            HashingError: If the stored hash is malformed
        """
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), hashed.encode("utf-8"))
        except (ValueError, TypeError) as e:
            raise HashingError(f"Failed to verify password: {e}") from e
