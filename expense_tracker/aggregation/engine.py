"""
Aggregation Engine

DESIGN DECISION: Aggregation is PURE.
It works on a list of expenses the caller already loaded and never
touches the store. There is no caching: after a write, the caller
reloads and aggregates again.

Every function accumulates into a dict keyed by the group, so the
result doesn't depend on input order.

MALFORMED DATES: monthly and yearly totals accept exactly the same dates,
zero-padded YYYY-MM-DD (see parse_expense_date), so every view sums to the
same grand total. By default an expense whose date doesn't parse is
skipped and a warning naming the expense is logged. With strict=True the
call raises MalformedDateError for the first offending expense instead.
"""

from collections import defaultdict
from enum import Enum
from typing import Iterable

import structlog

from expense_tracker.models.expense import Expense, parse_expense_date


logger = structlog.get_logger(__name__)


class MalformedDateError(ValueError):
    """An expense date could not be turned into a month or year key."""

    def __init__(self, expense_id: int, raw_date: str, view: str):
        self.expense_id = expense_id
        self.raw_date = raw_date
        self.view = view
        super().__init__(
            f"Expense {expense_id} has a malformed date for {view} totals: {raw_date!r}"
        )


class AggregationView(str, Enum):
    """The summaries a chart can ask for."""
    CATEGORY = "category"
    MONTHLY = "monthly"
    YEARLY = "yearly"


def _month_key(raw_date: str) -> str:
    parse_expense_date(raw_date)
    return raw_date[:7]


def _year_key(raw_date: str) -> str:
    parse_expense_date(raw_date)
    return raw_date[:4]


def _grouped_totals(
    expenses: Iterable[Expense],
    key_func,
    view: AggregationView,
    strict: bool,
) -> dict[str, float]:
    """Sum amounts per key, handling bad keys per the strict flag."""
    totals: dict[str, float] = defaultdict(float)

    for expense in expenses:
        try:
            key = key_func(expense.date)
        except ValueError:
            if strict:
                raise MalformedDateError(expense.id, expense.date, view.value)
            logger.warning(
                "malformed_date_skipped",
                expense_id=expense.id,
                raw_date=expense.date,
                view=view.value,
            )
            continue
        totals[key] += expense.amount

    return dict(totals)


def category_totals(expenses: Iterable[Expense]) -> dict[str, float]:
    """
    Sum amounts by exact category label.

    Only categories that occur in the input appear in the result.
    """
    totals: dict[str, float] = defaultdict(float)
    for expense in expenses:
        totals[expense.category] += expense.amount
    return dict(totals)


def monthly_totals(
    expenses: Iterable[Expense],
    strict: bool = False,
) -> dict[str, float]:
    """Sum amounts by month (YYYY-MM, the first 7 characters of a valid date)."""
    return _grouped_totals(expenses, _month_key, AggregationView.MONTHLY, strict)


def yearly_totals(
    expenses: Iterable[Expense],
    strict: bool = False,
) -> dict[str, float]:
    """Sum amounts by year. Dates must parse as YYYY-MM-DD."""
    return _grouped_totals(expenses, _year_key, AggregationView.YEARLY, strict)


def aggregate(
    expenses: Iterable[Expense],
    view: AggregationView,
    strict: bool = False,
) -> dict[str, float]:
    """Dispatch to the totals function for a view."""
    if view == AggregationView.CATEGORY:
        return category_totals(expenses)
    elif view == AggregationView.MONTHLY:
        return monthly_totals(expenses, strict=strict)
    elif view == AggregationView.YEARLY:
        return yearly_totals(expenses, strict=strict)
    raise ValueError(f"Unknown aggregation view: {view}")


def sorted_series(totals: dict[str, float]) -> list[tuple[str, float]]:
    """
    Key-sorted (label, total) pairs, the order bar and line charts draw in.

    YYYY-MM and YYYY keys sort chronologically as plain strings.
    """
    return sorted(totals.items(), key=lambda item: item[0])


def total_amount(expenses: Iterable[Expense]) -> float:
    return sum(expense.amount for expense in expenses)
