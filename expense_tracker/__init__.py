"""
Expense Tracker - Core Package

Persistent record store for expenses and user credentials, plus the
aggregation logic that turns stored expenses into category, monthly
and yearly summaries.

DESIGN PRINCIPLES:
1. The store owns the data, callers reload after every write
2. Fail loud internally, fail soft at the edge
3. Passwords never leave the credential store in plaintext
4. Aggregation never touches the store
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
