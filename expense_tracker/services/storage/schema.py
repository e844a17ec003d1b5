"""
Schema Manager

Creates the expenses and users tables if they don't exist yet.
Safe to run on every start: it never drops or alters anything.

If an existing table is missing a required column we refuse to start
rather than migrate it behind the user's back.
"""

import sqlite3

import structlog

from expense_tracker.services.storage.interface import SchemaError, StorageError
from expense_tracker.services.storage.sqlite import SQLiteClient


logger = structlog.get_logger(__name__)


EXPENSES_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS expenses (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        date TEXT NOT NULL,
        amount REAL NOT NULL,
        category TEXT NOT NULL,
        description TEXT,
        payment_method TEXT
    )
"""

USERS_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        username TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL
    )
"""

REQUIRED_COLUMNS = {
    "expenses": {"id", "date", "amount", "category", "description", "payment_method"},
    "users": {"id", "username", "password_hash"},
}


def table_columns(connection: sqlite3.Connection, table: str) -> set[str]:
    """Column names of an existing table (empty if the table doesn't exist)."""
    rows = connection.execute(f"PRAGMA table_info({table})").fetchall()
    return {row[1] for row in rows}


def ensure_schema(client: SQLiteClient) -> None:
    """
    Make sure both tables exist with the columns the repositories need.

    Raises:
        SchemaError: If the store can't be opened, the tables can't be
                     created, or an existing table lacks required columns.
                     This is fatal: the application must not start.
    """
    try:
        connection = client.connect()
        with connection:
            connection.execute(EXPENSES_TABLE_SQL)
            connection.execute(USERS_TABLE_SQL)

        for table, required in REQUIRED_COLUMNS.items():
            missing = required - table_columns(connection, table)
            if missing:
                raise SchemaError(
                    f"Table '{table}' in {client.db_path} is missing columns: "
                    f"{', '.join(sorted(missing))}"
                )
    except SchemaError:
        raise
    except (StorageError, sqlite3.Error) as e:
        raise SchemaError(f"Failed to create schema in {client.db_path}: {e}") from e

    logger.info("schema_ensured", database=client.db_path)
