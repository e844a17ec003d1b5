"""
Form Input Validation

Two validators, one per form the presentation layer submits:

SIGNUP:
- Username and password must both be present
- Password policy: minimum length, at least one digit, at least one
  non-alphanumeric symbol
- Uniqueness is NOT checked here (that needs the store)

EXPENSE:
- Date and category must be present
- Amount must parse as a finite, non-negative number
- Date format is only a WARNING: the store keeps whatever string it gets,
  the aggregation engine copes with malformed dates

IMPORTANT: Validation NEVER silently fixes issues.
An unparseable amount is an error, not zero.
"""

import math
import string
from typing import Optional, Union

from pydantic import ValidationError

from expense_tracker.config import get_settings
from expense_tracker.models.expense import ExpenseInput, parse_expense_date
from expense_tracker.models.validation import ValidationIssue, ValidationResult


PASSWORD_POLICY_MESSAGE = (
    "Password must be at least {min_length} characters long, "
    "include a number and a symbol"
)


def is_password_valid(password: str, min_length: int = 5) -> bool:
    """Check the password complexity policy."""
    has_number = any(c in string.digits for c in password)
    has_symbol = any(not c.isalnum() for c in password)
    has_min_length = len(password) >= min_length

    return has_number and has_symbol and has_min_length


class SignupValidator:
    """Validates a signup form before anything touches the store."""

    def __init__(self, min_length: Optional[int] = None):
        self._min_length = (
            min_length
            if min_length is not None
            else get_settings().security.password_min_length
        )

    @property
    def policy_message(self) -> str:
        return PASSWORD_POLICY_MESSAGE.format(min_length=self._min_length)

    def validate(self, username: str, password: str) -> ValidationResult:
        issues = []

        if not username or not password:
            issues.append(ValidationIssue(
                field="username" if not username else "password",
                issue_type="missing",
                message="Username and password cannot be empty",
            ))
            # Policy is meaningless on an empty form
            return ValidationResult(issues=issues)

        if not is_password_valid(password, self._min_length):
            issues.append(ValidationIssue(
                field="password",
                issue_type="weak_password",
                message=self.policy_message,
            ))

        return ValidationResult(issues=issues)


class ExpenseValidator:
    """Turns raw expense form fields into an ExpenseInput, or explains why not."""

    def _parse_amount(
        self,
        amount: Union[str, float, int],
    ) -> tuple[Optional[float], Optional[ValidationIssue]]:
        if isinstance(amount, str):
            text = amount.strip()
            if not text:
                return None, ValidationIssue(
                    field="amount",
                    issue_type="missing",
                    message="Amount is required",
                )
            try:
                value = float(text)
            except ValueError:
                return None, ValidationIssue(
                    field="amount",
                    issue_type="invalid_format",
                    message=f"Amount is not a number: {text}",
                )
        else:
            value = float(amount)

        if not math.isfinite(value):
            return None, ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be a finite number",
            )
        if value < 0:
            return None, ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount cannot be negative",
            )
        return value, None

    def validate(
        self,
        date: str,
        amount: Union[str, float, int],
        category: str,
        description: str = "",
        payment_method: str = "",
    ) -> tuple[Optional[ExpenseInput], ValidationResult]:
        """
        Validate an expense form.

        Returns:
            (expense, result) - expense is None whenever result has errors
        """
        issues = []

        date = (date or "").strip()
        if not date:
            issues.append(ValidationIssue(
                field="date",
                issue_type="missing",
                message="Date is required",
            ))
        else:
            try:
                parse_expense_date(date)
            except ValueError:
                issues.append(ValidationIssue(
                    field="date",
                    issue_type="invalid_format",
                    message=f"Date should look like YYYY-MM-DD, got {date}",
                    severity="warning",
                ))

        if not (category or "").strip():
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message="Category is required",
            ))

        value, amount_issue = self._parse_amount(amount)
        if amount_issue:
            issues.append(amount_issue)

        result = ValidationResult(issues=issues)
        if result.has_errors:
            return None, result

        try:
            expense = ExpenseInput(
                date=date,
                amount=value,
                category=category,
                description=description or "",
                payment_method=payment_method or "",
            )
        except ValidationError as e:
            for error in e.errors():
                issues.append(ValidationIssue(
                    field=".".join(str(loc) for loc in error["loc"]),
                    issue_type="schema",
                    message=error["msg"],
                ))
            return None, ValidationResult(issues=issues)

        return expense, result
