"""
Expense Data Models

These models define the shapes expenses take on their way in and out of
the store:
1. ExpenseInput - what a caller submits (no id, the store assigns one)
2. Expense - a fully materialized row, including its store-assigned id

DESIGN DECISION: Amount validation happens on the way IN, before anything
reaches the store. On the way OUT the store is authoritative: a row another
tool wrote with a negative or NaN amount still materializes as an Expense,
so it can be listed, counted and deleted like any other.

Dates are kept as strings. parse_expense_date() is the one definition of a
well-formed date, shared by form validation and the aggregation engine.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ExpenseCategory(str, Enum):
    """
    Categories offered by the entry form.

    The store does NOT constrain categories to this list - any label is
    persisted as given. The list only exists so collaborators can offer
    a consistent choice.
    """
    HOUSING_AND_UTILITIES = "Housing and Utilities"
    FOOD = "Food"
    TRANSPORTATION = "Transportation"
    HEALTH_AND_PERSONAL_CARE = "Health and Personal Care"
    ENTERTAINMENT_AND_LEISURE = "Entertainment and Leisure"
    SHOPPING = "Shopping"
    EDUCATION_AND_PROFESSIONAL_DEVELOPMENT = "Education and Professional Development"
    TRAVEL = "Travel"
    SAVINGS_AND_INVESTMENTS = "Savings and Investments"
    DEBT_PAYMENTS = "Debt Payments"
    MISCELLANEOUS = "Miscellaneous"


class ExpenseInput(BaseModel):
    """
    An expense as submitted for insertion.

    The date is kept as the ISO string the caller typed (YYYY-MM-DD).
    It is NOT parsed here; the aggregation engine deals with bad dates.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    date: str = Field(
        ...,
        description="Calendar date as YYYY-MM-DD"
    )
    amount: float = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        description="Amount spent (finite, non-negative)"
    )
    category: str = Field(
        ...,
        description="Free-text category label"
    )
    description: str = Field(
        default="",
        description="What the money was spent on"
    )
    payment_method: str = Field(
        default="",
        description="Cash, card, transfer..."
    )


class Expense(ExpenseInput):
    """
    A persisted expense.

    The id is assigned by the store. Passing an Expense to the repository's
    add() is allowed; the id is ignored and a fresh one is assigned.

    The amount is whatever the store holds. Only ExpenseInput enforces
    the finite, non-negative rule.
    """

    id: int = Field(
        ...,
        description="Store-assigned surrogate key"
    )
    amount: float = Field(
        ...,
        description="Amount as persisted"
    )

    def to_input(self) -> ExpenseInput:
        """
        Drop the id, e.g. to re-create a deleted expense.

        Raises:
            ValidationError: If the persisted amount wouldn't be accepted today
        """
        return ExpenseInput(**self.model_dump(exclude={"id"}))


DATE_FORMAT = "%Y-%m-%d"


def parse_expense_date(raw_date: str) -> datetime:
    """
    Parse a zero-padded YYYY-MM-DD date.

    strptime alone accepts "2023-1-5"; the length check rules that out so
    the month key (the first 7 characters) is always YYYY-MM.

    Raises:
        ValueError: If the string is not exactly a valid YYYY-MM-DD date
    """
    if len(raw_date) != 10:
        raise ValueError(f"Expected YYYY-MM-DD, got {raw_date!r}")
    return datetime.strptime(raw_date, DATE_FORMAT)
