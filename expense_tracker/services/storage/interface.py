"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the credential store and the flows decoupled from SQLite
2. Use in-memory fakes for testing the flows
3. Swap the embedded store later without touching business logic

The interface is intentionally small - we're not building an ORM.
Just insert, list and delete for expenses, and lookup by username for users.
There is deliberately NO update operation: expenses are immutable once stored.
"""

from abc import ABC, abstractmethod
from typing import Optional

from expense_tracker.models.expense import Expense, ExpenseInput
from expense_tracker.models.user import User


class ExpenseStorageInterface(ABC):
    """
    Abstract interface for expense storage operations.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def add(self, expense: ExpenseInput) -> int:
        """
        Insert a new expense.

        Args:
            expense: The expense to insert. If it carries an id, the id
                     is ignored.

        Returns:
            The id assigned by the store

        Raises:
            StorageError: If the insert fails
        """
        pass

    @abstractmethod
    def list(self) -> list[Expense]:
        """
        Load every stored expense.

        Order is not meaningful; callers sort explicitly.

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    def delete(self, expense_id: int) -> None:
        """
        Delete an expense by id.

        Deleting an id that doesn't exist is a no-op, not an error.

        Raises:
            StorageError: If the delete fails
        """
        pass

    @abstractmethod
    def count(self) -> int:
        """Number of stored expenses."""
        pass


class UserStorageInterface(ABC):
    """
    Abstract interface for raw user rows.

    Knows nothing about hashing - it stores whatever hash it is given.
    The credential store sits on top of this.
    """

    @abstractmethod
    def insert(self, username: str, password_hash: str) -> int:
        """
        Insert a user row.

        Returns:
            The id assigned by the store

        Raises:
            DuplicateError: If the username is taken
            StorageError: If the insert fails for any other reason
        """
        pass

    @abstractmethod
    def get_by_username(self, username: str) -> Optional[User]:
        """
        Look up a user by exact (case-sensitive) username.

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    def exists(self, username: str) -> bool:
        """Check whether a user with this exact username exists."""
        pass

    @abstractmethod
    def delete(self, username: str) -> None:
        """Delete a user by username. No-op if absent."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass


class SchemaError(StorageError):
    """The required tables could not be created."""
    pass
