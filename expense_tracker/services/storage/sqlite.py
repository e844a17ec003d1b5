"""
SQLite Storage Implementation

DESIGN DECISION: SQLite is the storage backend because:
1. It runs in-process, there is no server to set up
2. The whole store is one file the user can back up
3. UNIQUE constraints give us username uniqueness for free

TRADEOFFS:
- One writer at a time (we assume a single active writer)
- No multi-statement transactions: every mutation is its own
  `with connection:` block, committed or rolled back on its own

The implementation follows the abstract interface, so the credential
store and the flows never import sqlite3 themselves.
"""

import sqlite3
from typing import Optional

import structlog
from pydantic import ValidationError
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from expense_tracker.config import get_settings
from expense_tracker.models.expense import Expense, ExpenseInput
from expense_tracker.models.user import User
from expense_tracker.services.storage.interface import (
    ConnectionError,
    DuplicateError,
    ExpenseStorageInterface,
    StorageError,
    UserStorageInterface,
)


logger = structlog.get_logger(__name__)


# Column order for expense rows
EXPENSE_COLUMNS = [
    "id",
    "date",
    "amount",
    "category",
    "description",
    "payment_method",
]

USER_COLUMNS = [
    "id",
    "username",
    "password_hash",
]


def _is_transient(exc: BaseException) -> bool:
    """Locked/busy databases are worth retrying, missing files are not."""
    if not isinstance(exc, sqlite3.OperationalError):
        return False
    message = str(exc).lower()
    return "locked" in message or "busy" in message


class SQLiteClient:
    """
    Low-level SQLite connection wrapper.

    Opens the connection lazily and reuses it for every statement.
    Statements that hit a lock held by another connection are retried.
    """

    def __init__(
        self,
        db_path: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_settings().storage
        self._db_path = db_path or settings.path
        self._timeout = timeout if timeout is not None else settings.timeout_seconds
        self._connection: Optional[sqlite3.Connection] = None

    @property
    def db_path(self) -> str:
        return self._db_path

    def _open(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._db_path, timeout=self._timeout)
        connection.row_factory = sqlite3.Row
        return connection

    def connect(self) -> sqlite3.Connection:
        """
        Get the open connection, opening it on first use.

        Raises:
            ConnectionError: If the database file can't be opened
        """
        if self._connection is None:
            try:
                self._connection = self._open()
            except sqlite3.Error as e:
                raise ConnectionError(
                    f"Failed to open database {self._db_path}: {e}"
                ) from e
        return self._connection

    @retry(
        retry=retry_if_exception(_is_transient),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        """
        Run one statement in its own transaction.

        A "database is locked" or "busy" error rolls the statement back and
        is retried; anything else (and the last failed attempt) propagates
        as a sqlite3 error for the caller to translate to StorageError.
        """
        connection = self.connect()
        with connection:
            return connection.execute(sql, params)

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def __enter__(self) -> "SQLiteClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class SQLiteExpenseStorage(ExpenseStorageInterface):
    """
    SQLite implementation of expense storage.

    One expense per row. NULL description / payment_method come back as "".
    """

    def __init__(self, client: Optional[SQLiteClient] = None):
        self._client = client or SQLiteClient()

    def _expense_to_params(self, expense: ExpenseInput) -> tuple:
        """Convert an expense to insert parameters (id deliberately left out)."""
        return (
            expense.date,
            expense.amount,
            expense.category,
            expense.description,
            expense.payment_method,
        )

    def _row_to_expense(self, row: sqlite3.Row) -> Expense:
        """Convert a database row to an Expense."""
        return Expense(
            id=row["id"],
            date=row["date"],
            amount=row["amount"],
            category=row["category"],
            description=row["description"] or "",
            payment_method=row["payment_method"] or "",
        )

    def add(self, expense: ExpenseInput) -> int:
        """
        Insert an expense and return its store-assigned id.

        Raises:
            ValidationError: If an Expense read back from the store is passed
                             in and its amount is negative or not finite
            StorageError: If the insert fails
        """
        if isinstance(expense, Expense):
            expense = expense.to_input()
        try:
            cursor = self._client.execute(
                "INSERT INTO expenses (date, amount, category, description, payment_method) "
                "VALUES (?, ?, ?, ?, ?)",
                self._expense_to_params(expense),
            )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to add expense: {e}") from e
        return cursor.lastrowid

    def list(self) -> list[Expense]:
        """Load every expense."""
        try:
            rows = self._client.execute(
                f"SELECT {', '.join(EXPENSE_COLUMNS)} FROM expenses ORDER BY id"
            ).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to list expenses: {e}") from e

        expenses = []
        for row in rows:
            try:
                expenses.append(self._row_to_expense(row))
            except ValidationError as e:
                # Only non-numeric amounts get here; negative and NaN ones load
                logger.warning(
                    "malformed_expense_row",
                    expense_id=row["id"],
                    error=str(e),
                )
        return expenses

    def delete(self, expense_id: int) -> None:
        """Delete an expense. Unknown ids are a no-op."""
        try:
            self._client.execute(
                "DELETE FROM expenses WHERE id = ?",
                (expense_id,),
            )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to delete expense {expense_id}: {e}") from e

    def count(self) -> int:
        try:
            row = self._client.execute("SELECT COUNT(*) FROM expenses").fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to count expenses: {e}") from e
        return row[0]


class SQLiteUserStorage(UserStorageInterface):
    """
    SQLite implementation of user storage.

    Username comparisons use SQLite's default BINARY collation,
    so lookups are exact and case-sensitive.
    """

    def __init__(self, client: Optional[SQLiteClient] = None):
        self._client = client or SQLiteClient()

    def _row_to_user(self, row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            username=row["username"],
            password_hash=row["password_hash"],
        )

    def insert(self, username: str, password_hash: str) -> int:
        """Insert a user row."""
        try:
            cursor = self._client.execute(
                "INSERT INTO users (username, password_hash) VALUES (?, ?)",
                (username, password_hash),
            )
        except sqlite3.IntegrityError as e:
            if "UNIQUE" in str(e).upper():
                raise DuplicateError(f"Username already exists: {username}") from e
            raise StorageError(f"Failed to add user: {e}") from e
        except sqlite3.Error as e:
            raise StorageError(f"Failed to add user: {e}") from e
        return cursor.lastrowid

    def get_by_username(self, username: str) -> Optional[User]:
        """Look up a user by exact username."""
        try:
            row = self._client.execute(
                f"SELECT {', '.join(USER_COLUMNS)} FROM users WHERE username = ?",
                (username,),
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to get user: {e}") from e

        if row is None:
            return None
        return self._row_to_user(row)

    def exists(self, username: str) -> bool:
        try:
            row = self._client.execute(
                "SELECT 1 FROM users WHERE username = ? LIMIT 1",
                (username,),
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to check username: {e}") from e
        return row is not None

    def delete(self, username: str) -> None:
        """Delete a user by username. Unknown usernames are a no-op."""
        try:
            self._client.execute(
                "DELETE FROM users WHERE username = ?",
                (username,),
            )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to delete user: {e}") from e
