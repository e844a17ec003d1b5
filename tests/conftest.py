"""Shared fixtures: a throwaway SQLite file per test and a cheap bcrypt hasher."""

import pytest

from expense_tracker.models.expense import Expense
from expense_tracker.services.auth import CredentialStore, PasswordHasher
from expense_tracker.services.storage import (
    SQLiteClient,
    SQLiteExpenseStorage,
    SQLiteUserStorage,
    ensure_schema,
)


# bcrypt's minimum cost, keeps the suite fast
TEST_BCRYPT_ROUNDS = 4


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "expenses.db")


@pytest.fixture
def client(db_path):
    client = SQLiteClient(db_path=db_path)
    ensure_schema(client)
    yield client
    client.close()


@pytest.fixture
def expense_storage(client):
    return SQLiteExpenseStorage(client)


@pytest.fixture
def user_storage(client):
    return SQLiteUserStorage(client)


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=TEST_BCRYPT_ROUNDS)


@pytest.fixture
def credential_store(user_storage, hasher):
    return CredentialStore(user_storage, hasher)


def _make_expense(
    expense_id: int = 1,
    date: str = "2023-01-01",
    amount: float = 10.0,
    category: str = "Food",
    description: str = "",
    payment_method: str = "",
) -> Expense:
    return Expense(
        id=expense_id,
        date=date,
        amount=amount,
        category=category,
        description=description,
        payment_method=payment_method,
    )


@pytest.fixture
def make_expense():
    """Factory for in-memory expenses (ids are whatever the test says)."""
    return _make_expense
