"""Input validation helpers shared by the entity services.

Each helper records a message in ``errors`` under the field name instead of
raising, so a single ValidationError can report every failing field.
"""

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterable, Optional, TypeVar

from pennywise.domain.errors import ValidationError
from pennywise.utils.date_parser import coerce_date, parse_month_key

HEX_COLOR_PATTERN = re.compile(r"^#(?:[0-9a-fA-F]{3}){1,2}$")

EnumT = TypeVar("EnumT", bound=Enum)


def raise_if_errors(errors: dict[str, str]) -> None:
    """Raise a ValidationError when any field failed."""
    if errors:
        raise ValidationError.from_fields(errors)


def reject_unknown_fields(fields: dict[str, Any], allowed: Iterable[str], ignored: Iterable[str]) -> dict[str, Any]:
    """Strip ignored fields and reject any field outside ``allowed``."""
    allowed = set(allowed)
    ignored = set(ignored)
    unknown = sorted(key for key in fields if key not in allowed and key not in ignored)
    if unknown:
        raise ValidationError.from_fields({key: "Field cannot be updated" for key in unknown})
    return {key: value for key, value in fields.items() if key in allowed}


def check_amount(errors: dict[str, str], field: str, value: Any, allow_zero: bool = False) -> Optional[Decimal]:
    """Validate a currency amount (> 0, or >= 0 when ``allow_zero``) in whole cents."""
    if value is None or value == "" or isinstance(value, bool):
        errors[field] = "Amount is required"
        return None
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        errors[field] = "Please enter a valid amount"
        return None
    if not amount.is_finite():
        errors[field] = "Please enter a valid amount"
        return None
    if allow_zero and amount < 0:
        errors[field] = "Amount cannot be negative"
        return None
    if not allow_zero and amount <= 0:
        errors[field] = "Amount must be greater than zero"
        return None
    if amount.normalize().as_tuple().exponent < -2:
        errors[field] = "Amount cannot have more than two decimal places"
        return None
    return amount


def check_choice(errors: dict[str, str], field: str, value: Any, enum_type: type[EnumT]) -> Optional[EnumT]:
    """Validate a value against an enum's members or values."""
    try:
        return enum_type(value)
    except ValueError:
        choices = ", ".join(member.value for member in enum_type)
        errors[field] = f"Must be one of: {choices}"
        return None


def check_text(errors: dict[str, str], field: str, value: Any) -> Optional[str]:
    """Validate a required, non-blank string."""
    if not isinstance(value, str) or not value.strip():
        errors[field] = "This field is required"
        return None
    return value.strip()


def check_date(errors: dict[str, str], field: str, value: Any) -> Optional[date]:
    """Validate a date (date object or ISO-8601 string)."""
    if value is None or value == "":
        errors[field] = "Please select a date"
        return None
    try:
        return coerce_date(value)
    except ValueError:
        errors[field] = "Please enter a valid date"
        return None


def check_month(errors: dict[str, str], field: str, value: Any) -> Optional[str]:
    """Validate a "YYYY-MM" month key."""
    try:
        parse_month_key(value if isinstance(value, str) else "")
    except ValueError:
        errors[field] = "Month must be in YYYY-MM form"
        return None
    return value


def check_color(errors: dict[str, str], field: str, value: Any) -> Optional[str]:
    """Validate a hex colour such as "#10b981"."""
    if not isinstance(value, str) or HEX_COLOR_PATTERN.match(value) is None:
        errors[field] = "Color must be a hex value like #10b981"
        return None
    return value


def require_month(month_key: str) -> str:
    """Validate a month key argument, raising immediately on failure."""
    errors: dict[str, str] = {}
    check_month(errors, "month", month_key)
    raise_if_errors(errors)
    return month_key
