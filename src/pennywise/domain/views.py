"""Derived-view assembler.

Joins budgets, categories, transactions and goals with aggregation results
into flat, render-ready records. Missing categories never fail a view: the
row falls back to the "Unknown" name with the default icon and colour.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from pennywise.domain import aggregation
from pennywise.domain.budget import BudgetService
from pennywise.domain.category import (
    DEFAULT_COLOR,
    DEFAULT_ICON,
    UNKNOWN_CATEGORY,
    CategoryService,
    category_color,
)
from pennywise.domain.entities import (
    BudgetStatus,
    Category,
    Goal,
    GoalProgress,
    MonthlySummary,
    TransactionType,
    Transaction,
    TrendPoint,
)
from pennywise.domain.goal import GoalService
from pennywise.domain.transaction import TransactionService
from pennywise.domain.validation import require_month
from pennywise.utils.date_parser import last_months, month_range

ONE_DECIMAL = Decimal("0.1")


def round_percent(value: Decimal) -> Decimal:
    """Round a percentage to one decimal place."""
    return value.quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class BudgetView:
    """Budget row enriched with category details and computed spend."""

    id: int
    category_id: int
    category_name: str
    category_icon: str
    category_color: str
    month: str
    amount: Decimal
    spent: Decimal
    remaining: Decimal
    percentage: Decimal
    status: BudgetStatus


@dataclass(frozen=True)
class BudgetOverview:
    """All budgets of a month with totals."""

    month: str
    budgets: tuple[BudgetView, ...]
    total_budget: Decimal
    total_spent: Decimal


@dataclass(frozen=True)
class TransactionView:
    """Transaction row with category icon and colour."""

    id: int
    date: date
    type: TransactionType
    category: str
    category_icon: str
    category_color: str
    amount: Decimal
    signed_amount: Decimal
    notes: Optional[str]


@dataclass(frozen=True)
class BreakdownRow:
    """One slice of the expense pie chart."""

    category: str
    amount: Decimal
    color: str
    share: Decimal


@dataclass(frozen=True)
class DashboardView:
    """Headline figures for the dashboard."""

    month: str
    summary: MonthlySummary
    active_goals: int
    recent_transactions: tuple[TransactionView, ...]


@dataclass(frozen=True)
class ReportView:
    """Monthly report figures."""

    month: str
    summary: MonthlySummary
    top_categories: tuple[BreakdownRow, ...]
    savings_rate: Decimal
    spending_rate: Decimal


@dataclass(frozen=True)
class GoalView:
    """Goal with its progress."""

    goal: Goal
    progress: GoalProgress


class ViewAssembler:
    """Builds view models from the entity services."""

    def __init__(
        self,
        transactions: TransactionService,
        categories: CategoryService,
        budgets: BudgetService,
        goals: GoalService,
    ):
        self.transactions = transactions
        self.categories = categories
        self.budgets = budgets
        self.goals = goals

    @classmethod
    def from_database(cls, db) -> "ViewAssembler":
        """Create an assembler whose services share one record store."""
        return cls(
            TransactionService(db),
            CategoryService(db),
            BudgetService(db),
            GoalService(db),
        )

    def _categories_by_name(self) -> dict[str, Category]:
        # Expense categories win over income ones with the same name
        categories = sorted(
            self.categories.list_categories(),
            key=lambda cat: cat.type == TransactionType.EXPENSE,
        )
        return {cat.name: cat for cat in categories}

    def budget_overview(self, month_key: str) -> BudgetOverview:
        """Budgets of a month with category details and spend computed from transactions."""
        budgets = self.budgets.list_by_month(month_key)
        categories = {cat.id: cat for cat in self.categories.list_categories()}
        transactions = self.transactions.list_by_month(month_key)

        rows = []
        for budget in budgets:
            category = categories.get(budget.category_id)
            consumption = aggregation.budget_consumption(
                budget, transactions, category.name if category is not None else None
            )
            rows.append(
                BudgetView(
                    id=budget.id,
                    category_id=budget.category_id,
                    category_name=category.name if category else UNKNOWN_CATEGORY,
                    category_icon=category.icon if category else DEFAULT_ICON,
                    category_color=category.color if category else DEFAULT_COLOR,
                    month=budget.month,
                    amount=budget.amount,
                    spent=consumption.spent,
                    remaining=budget.amount - consumption.spent,
                    percentage=round_percent(consumption.percentage),
                    status=consumption.status,
                )
            )

        return BudgetOverview(
            month=month_key,
            budgets=tuple(rows),
            total_budget=sum((row.amount for row in rows), Decimal("0")),
            total_spent=sum((row.spent for row in rows), Decimal("0")),
        )

    def _transaction_view(self, txn: Transaction, categories: dict[str, Category]) -> TransactionView:
        category = categories.get(txn.category)
        return TransactionView(
            id=txn.id,
            date=txn.date,
            type=txn.type,
            category=txn.category,
            category_icon=category.icon if category else DEFAULT_ICON,
            category_color=category.color if category else category_color(txn.category),
            amount=txn.amount,
            signed_amount=txn.signed_amount,
            notes=txn.notes,
        )

    def recent_transactions(self, month_key: str, limit: Optional[int] = 5) -> list[TransactionView]:
        """Newest transactions of a month with category icons."""
        transactions = self.transactions.list_by_month(month_key)
        if limit is not None:
            transactions = transactions[:limit]
        categories = self._categories_by_name()
        return [self._transaction_view(txn, categories) for txn in transactions]

    def all_transactions(self) -> list[TransactionView]:
        """Every transaction, newest first, with category icons."""
        categories = self._categories_by_name()
        return [self._transaction_view(txn, categories) for txn in self.transactions.list_transactions()]

    def expense_breakdown(self, month_key: str, limit: Optional[int] = None) -> list[BreakdownRow]:
        """Expense breakdown ranked by amount, with colours and shares."""
        breakdown = aggregation.top_categories(
            self.transactions.get_category_breakdown(month_key), limit=None
        )
        total = sum((row.amount for row in breakdown), Decimal("0"))
        categories = self._categories_by_name()
        rows = []
        for row in breakdown:
            category = categories.get(row.category)
            share = row.amount / total * aggregation.HUNDRED if total else Decimal("0")
            rows.append(
                BreakdownRow(
                    category=row.category,
                    amount=row.amount,
                    color=category.color if category else category_color(row.category),
                    share=round_percent(share),
                )
            )
        return rows if limit is None else rows[:limit]

    def dashboard(self, month_key: str, recent_limit: int = 5) -> DashboardView:
        """Summary, active goal count and recent activity for a month."""
        return DashboardView(
            month=month_key,
            summary=self.transactions.get_summary_by_month(month_key),
            active_goals=len(self.goals.list_active()),
            recent_transactions=tuple(self.recent_transactions(month_key, limit=recent_limit)),
        )

    def report(self, month_key: str, top: int = 5) -> ReportView:
        """Monthly report: summary, top categories and income rates."""
        summary = self.transactions.get_summary_by_month(month_key)
        return ReportView(
            month=month_key,
            summary=summary,
            top_categories=tuple(self.expense_breakdown(month_key, limit=top)),
            savings_rate=round_percent(aggregation.savings_rate(summary)),
            spending_rate=round_percent(aggregation.spending_rate(summary)),
        )

    def trend(self, end_month_key: str, months: int = 6) -> list[TrendPoint]:
        """Income and expense series for the months ending at ``end_month_key``."""
        month_keys = last_months(require_month(end_month_key), months)
        start_date, _ = month_range(month_keys[0])
        _, end_date = month_range(end_month_key)
        transactions = self.transactions.list_by_date_range(start_date, end_date)
        return aggregation.monthly_trend(transactions, month_keys)

    def goal_overview(self, today: Optional[date] = None, include_completed: bool = False) -> list[GoalView]:
        """Goals (active only by default) with their progress."""
        goals = self.goals.list_goals() if include_completed else self.goals.list_active()
        return [GoalView(goal=goal, progress=self.goals.progress(goal, today=today)) for goal in goals]
