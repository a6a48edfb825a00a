"""Domain model entities for pennywise.

These are pure data classes representing business concepts, independent of
the record store that holds them. Amounts are stored as non-negative
``Decimal`` magnitudes; the sign of a transaction comes from its type.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    """Direction of a transaction or category."""

    INCOME = "income"
    EXPENSE = "expense"


class GoalStatus(str, Enum):
    """Stored status of a savings goal."""

    ACTIVE = "active"
    COMPLETED = "completed"


class BudgetStatus(str, Enum):
    """Consumption tier of a budget."""

    ON_TRACK = "on-track"
    NEAR_LIMIT = "near-limit"
    OVER = "over"


@dataclass(frozen=True)
class Transaction:
    """Income or expense transaction."""

    id: int
    amount: Decimal
    type: TransactionType
    category: str
    date: date
    notes: Optional[str]
    created_at: datetime
    version: int = 1

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the sign implied by the transaction type."""
        return self.amount if self.type == TransactionType.INCOME else -self.amount


@dataclass(frozen=True)
class Category:
    """Transaction category."""

    id: int
    name: str
    type: TransactionType
    color: str
    icon: str
    is_default: bool = False
    version: int = 1


@dataclass(frozen=True)
class Budget:
    """Monthly spending allocation for a category.

    ``spent`` is a cache of the month's expense total for the category and is
    always recomputable from transactions.
    """

    id: int
    category_id: int
    month: str
    amount: Decimal
    spent: Decimal = Decimal("0")
    version: int = 1


@dataclass(frozen=True)
class Goal:
    """Savings goal."""

    id: int
    name: str
    target_amount: Decimal
    current_amount: Decimal
    deadline: date
    created_at: datetime
    status: GoalStatus = GoalStatus.ACTIVE
    version: int = 1


@dataclass(frozen=True)
class MonthlySummary:
    """Income, expenses and net for a month."""

    income: Decimal
    expenses: Decimal
    net: Decimal


@dataclass(frozen=True)
class CategoryAmount:
    """Total expense amount for one category."""

    category: str
    amount: Decimal


@dataclass(frozen=True)
class BudgetConsumption:
    """Spent-vs-allocated figures for a budget."""

    spent: Decimal
    amount: Decimal
    percentage: Decimal
    status: BudgetStatus


@dataclass(frozen=True)
class GoalProgress:
    """Progress of a goal towards its target on a given day."""

    percentage: Decimal
    days_remaining: int
    label: str
    urgent: bool = False


@dataclass(frozen=True)
class TrendPoint:
    """Income and expenses for one month of a trend series."""

    month: str
    income: Decimal
    expenses: Decimal
