"""Utility functions for pennywise."""

from pennywise.utils.date_parser import parse_date, parse_month_key, month_range
from pennywise.utils.amount_parser import parse_amount, format_currency

__all__ = ["parse_date", "parse_month_key", "month_range", "parse_amount", "format_currency"]
