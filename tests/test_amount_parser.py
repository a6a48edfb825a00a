"""Tests for amount parsing and formatting."""

import pytest
from decimal import Decimal

from pennywise.utils.amount_parser import format_currency, parse_amount


@pytest.mark.parametrize(
    "text, expected",
    [
        ("123.45", Decimal("123.45")),
        ("$123.45", Decimal("123.45")),
        ("1,234.56", Decimal("1234.56")),
        (" €40 ", Decimal("40")),
        ("-12.50", Decimal("-12.50")),
    ],
)
def test_parse_amount(text, expected):
    """Test parsing supported amount formats."""
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "12.3.4", "NaN", "Infinity"])
def test_parse_amount_invalid(text):
    """Test that unparseable amounts raise ValueError."""
    with pytest.raises(ValueError):
        parse_amount(text)


def test_format_currency():
    """Test currency formatting."""
    assert format_currency(Decimal("1234.5")) == "$1,234.50"
    assert format_currency(Decimal("-40")) == "-$40.00"
    assert format_currency(Decimal("0")) == "$0.00"
