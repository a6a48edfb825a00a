"""Pennywise - personal finance tracking.

Transactions, monthly budgets and savings goals over a pluggable record
store, with a click command-line front end (``pennywise``).
"""

__version__ = "0.1.0"
