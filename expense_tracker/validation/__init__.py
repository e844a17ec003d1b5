"""Form validation package."""

from expense_tracker.validation.validator import (
    ExpenseValidator,
    SignupValidator,
    is_password_valid,
)

__all__ = ["ExpenseValidator", "SignupValidator", "is_password_valid"]
