"""Aggregation package."""

from expense_tracker.aggregation.engine import (
    AggregationView,
    MalformedDateError,
    aggregate,
    category_totals,
    monthly_totals,
    sorted_series,
    total_amount,
    yearly_totals,
)

__all__ = [
    "AggregationView",
    "MalformedDateError",
    "aggregate",
    "category_totals",
    "monthly_totals",
    "sorted_series",
    "total_amount",
    "yearly_totals",
]
