"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker.
All data flowing in and out of the store must conform to these schemas.
"""

from expense_tracker.models.expense import (
    Expense,
    ExpenseCategory,
    ExpenseInput,
)
from expense_tracker.models.user import (
    User,
    UserIdentity,
)
from expense_tracker.models.result import OperationResult
from expense_tracker.models.validation import (
    ValidationIssue,
    ValidationResult,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    AuditTarget,
)

__all__ = [
    # Expense models
    "Expense",
    "ExpenseCategory",
    "ExpenseInput",
    # User models
    "User",
    "UserIdentity",
    # Result models
    "OperationResult",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    "AuditTarget",
]
