"""
Audit Models for Expense Tracker

Every store mutation and every authentication attempt is logged.
This provides:
1. Traceability of who changed what
2. Debugging information when a write fails
3. A record of failed logins

DESIGN DECISION: Audit events never carry passwords or password hashes.
Usernames are fine; credential material is not.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """What happened."""
    # Store lifecycle
    SCHEMA_ENSURED = "schema_ensured"

    # Expenses
    EXPENSE_ADDED = "expense_added"
    EXPENSE_REJECTED = "expense_rejected"
    EXPENSE_DELETED = "expense_deleted"

    # Credentials
    USER_REGISTERED = "user_registered"
    SIGNUP_REJECTED = "signup_rejected"
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"

    # Failures caught at the flow boundary
    STORE_ERROR = "store_error"
    HASHING_ERROR = "hashing_error"


class AuditSeverity(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditTarget(str, Enum):
    """Which table an event touched, if any."""
    EXPENSES = "expenses"
    USERS = "users"
    DATABASE = "database"


class AuditEvent(BaseModel):
    """
    One line of the audit trail.

    `target` and `row_id` say which row was touched; `username` says on
    whose behalf. Either may be empty (a failed login has no row, a schema
    check has no user).
    """

    event_id: UUID = Field(default_factory=uuid4)
    occurred_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    target: Optional[AuditTarget] = None
    row_id: Optional[int] = Field(
        default=None,
        description="Store id of the expense or user row"
    )
    username: Optional[str] = Field(
        default=None,
        description="Login name involved, never the password"
    )

    # Ties together everything logged for one form submission
    correlation_id: Optional[UUID] = None

    summary: str = Field(
        ...,
        max_length=500,
        description="One-line account of the event"
    )
    context: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Flatten for structlog; empty fields are left out."""
        return self.model_dump(mode="json", exclude_none=True)


class AuditEventBuilder:
    """
    Constructors for the events the flows emit.

    Usage:
        event = AuditEventBuilder.expense_added(expense_id, category, amount)
        event = AuditEventBuilder.login_failed(username)
    """

    @staticmethod
    def schema_ensured(database: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SCHEMA_ENSURED,
            target=AuditTarget.DATABASE,
            summary=f"Schema ensured for {database}",
            context={"database": database},
        )

    @staticmethod
    def expense_added(
        expense_id: int,
        category: str,
        amount: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            target=AuditTarget.EXPENSES,
            row_id=expense_id,
            correlation_id=correlation_id,
            summary=f"Expense added: {category} {amount:.2f}",
            context={"category": category, "amount": amount},
        )

    @staticmethod
    def expense_rejected(
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_REJECTED,
            severity=AuditSeverity.WARNING,
            target=AuditTarget.EXPENSES,
            correlation_id=correlation_id,
            summary=f"Expense not saved: {reason}",
        )

    @staticmethod
    def expense_deleted(
        expense_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            target=AuditTarget.EXPENSES,
            row_id=expense_id,
            correlation_id=correlation_id,
            summary=f"Expense {expense_id} deleted",
        )

    @staticmethod
    def user_registered(
        user_id: int,
        username: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_REGISTERED,
            target=AuditTarget.USERS,
            row_id=user_id,
            username=username,
            correlation_id=correlation_id,
            summary=f"New account for {username}",
        )

    @staticmethod
    def signup_rejected(
        username: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIGNUP_REJECTED,
            severity=AuditSeverity.WARNING,
            target=AuditTarget.USERS,
            username=username or None,
            correlation_id=correlation_id,
            summary=f"Signup refused: {reason}",
        )

    @staticmethod
    def login_succeeded(
        user_id: int,
        username: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            target=AuditTarget.USERS,
            row_id=user_id,
            username=username,
            correlation_id=correlation_id,
            summary=f"{username} logged in",
        )

    @staticmethod
    def login_failed(
        username: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        # No row id: it would reveal whether the username exists
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            username=username,
            correlation_id=correlation_id,
            summary="Login failed",
        )

    @staticmethod
    def store_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_ERROR,
            severity=AuditSeverity.ERROR,
            target=AuditTarget.DATABASE,
            correlation_id=correlation_id,
            summary=f"{operation} failed in the store",
            context={"operation": operation},
            error_message=error_message,
        )

    @staticmethod
    def hashing_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.HASHING_ERROR,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            summary=f"{operation} failed while hashing a password",
            context={"operation": operation},
            error_message=error_message,
        )
