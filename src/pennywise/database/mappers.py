"""Mapper functions to convert between store records and domain entities.

Records may come from the in-memory store or SQLAlchemy (native Python types)
or from the remote store (JSON scalars), so every field is coerced.
"""

from datetime import datetime, UTC
from decimal import Decimal
from typing import Any

from pennywise.domain import entities as domain
from pennywise.utils.date_parser import coerce_date


def _decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _timestamp(value: Any) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        # SQLite drops the timezone; timestamps are always written in UTC
        value = value.replace(tzinfo=UTC)
    return value


def transaction_to_domain(record: dict[str, Any]) -> domain.Transaction:
    """Convert a transaction record to a domain Transaction entity."""
    return domain.Transaction(
        id=int(record["id"]),
        amount=_decimal(record["amount"]),
        type=domain.TransactionType(record["type"]),
        category=record["category"],
        date=coerce_date(record["date"]),
        notes=record.get("notes"),
        created_at=_timestamp(record["created_at"]),
        version=int(record.get("version", 1)),
    )


def category_to_domain(record: dict[str, Any]) -> domain.Category:
    """Convert a category record to a domain Category entity."""
    return domain.Category(
        id=int(record["id"]),
        name=record["name"],
        type=domain.TransactionType(record["type"]),
        color=record["color"],
        icon=record["icon"],
        is_default=bool(record.get("is_default", False)),
        version=int(record.get("version", 1)),
    )


def budget_to_domain(record: dict[str, Any]) -> domain.Budget:
    """Convert a budget record to a domain Budget entity."""
    return domain.Budget(
        id=int(record["id"]),
        category_id=int(record["category_id"]),
        month=record["month"],
        amount=_decimal(record["amount"]),
        spent=_decimal(record.get("spent") or 0),
        version=int(record.get("version", 1)),
    )


def goal_to_domain(record: dict[str, Any]) -> domain.Goal:
    """Convert a goal record to a domain Goal entity."""
    return domain.Goal(
        id=int(record["id"]),
        name=record["name"],
        target_amount=_decimal(record["target_amount"]),
        current_amount=_decimal(record.get("current_amount") or 0),
        deadline=coerce_date(record["deadline"]),
        created_at=_timestamp(record["created_at"]),
        status=domain.GoalStatus(record.get("status", "active")),
        version=int(record.get("version", 1)),
    )


def to_record(fields: dict[str, Any]) -> dict[str, Any]:
    """Convert domain values in a write payload to plain record values."""
    return {
        key: value.value if isinstance(value, (domain.TransactionType, domain.GoalStatus)) else value
        for key, value in fields.items()
    }
