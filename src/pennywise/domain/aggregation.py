"""Aggregation engine.

Pure functions that derive summaries, breakdowns, budget consumption and goal
progress from snapshots of entities. Nothing here touches a store and inputs
are assumed to be validated already: a malformed snapshot (for example a
negative amount) yields an arithmetically consistent but meaningless result.
"""

from collections import defaultdict
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from pennywise.domain.entities import (
    Budget,
    BudgetConsumption,
    BudgetStatus,
    CategoryAmount,
    Goal,
    GoalProgress,
    GoalStatus,
    MonthlySummary,
    Transaction,
    TransactionType,
    TrendPoint,
)
from pennywise.domain.errors import ValidationError
from pennywise.domain.result import Err, Ok, Result
from pennywise.utils.date_parser import month_range

ZERO = Decimal("0")
HUNDRED = Decimal("100")
NEAR_LIMIT_PERCENT = Decimal("80")
URGENT_DAYS = 30


def transactions_in_month(
    transactions: Iterable[Transaction], month_key: str
) -> list[Transaction]:
    """Filter transactions whose date falls inside the calendar month."""
    start_date, end_date = month_range(month_key)
    return [txn for txn in transactions if start_date <= txn.date <= end_date]


def monthly_summary(transactions: Iterable[Transaction], month_key: str) -> MonthlySummary:
    """Sum income and expenses for a month.

    Args:
        transactions: Transaction snapshot (any months)
        month_key: Month in "YYYY-MM" form

    Returns:
        MonthlySummary with ``net == income - expenses``
    """
    income = ZERO
    expenses = ZERO
    for txn in transactions_in_month(transactions, month_key):
        if txn.type == TransactionType.INCOME:
            income += txn.amount
        elif txn.type == TransactionType.EXPENSE:
            expenses += txn.amount
    return MonthlySummary(income=income, expenses=expenses, net=income - expenses)


def category_breakdown(
    transactions: Iterable[Transaction], month_key: str
) -> list[CategoryAmount]:
    """Total the month's expenses per category name.

    The result is unordered (first-seen order); use ``top_categories`` for a
    ranked view.
    """
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for txn in transactions_in_month(transactions, month_key):
        if txn.type == TransactionType.EXPENSE:
            totals[txn.category] += txn.amount
    return [CategoryAmount(category=name, amount=amount) for name, amount in totals.items()]


def top_categories(
    breakdown: Sequence[CategoryAmount], limit: Optional[int] = 5
) -> list[CategoryAmount]:
    """Rank a category breakdown by amount, largest first."""
    ranked = sorted(breakdown, key=lambda row: row.amount, reverse=True)
    return ranked if limit is None else ranked[:limit]


def spent_for_category(
    transactions: Iterable[Transaction], category_name: str, month_key: str
) -> Decimal:
    """Sum the month's expenses booked under ``category_name``."""
    return sum(
        (
            txn.amount
            for txn in transactions_in_month(transactions, month_key)
            if txn.type == TransactionType.EXPENSE and txn.category == category_name
        ),
        ZERO,
    )


def consumption_percentage(spent: Decimal, amount: Decimal) -> Decimal:
    """Spent as a percentage of the allocated amount."""
    if amount == ZERO:
        return HUNDRED if spent > ZERO else ZERO
    return spent / amount * HUNDRED


def budget_status(spent: Decimal, amount: Decimal) -> BudgetStatus:
    """Tier a budget: >=100% over, >=80% near limit, otherwise on track."""
    if spent >= amount:
        return BudgetStatus.OVER
    if spent * HUNDRED >= amount * NEAR_LIMIT_PERCENT:
        return BudgetStatus.NEAR_LIMIT
    return BudgetStatus.ON_TRACK


def budget_consumption(
    budget: Budget, transactions: Iterable[Transaction], category_name: Optional[str]
) -> BudgetConsumption:
    """Compute spent-vs-allocated for a budget.

    Args:
        budget: Budget to evaluate
        transactions: Transaction snapshot
        category_name: Name of the budget's linked category, or None when the
            category no longer exists (nothing can match, so spent is 0)
    """
    spent = ZERO
    if category_name is not None:
        spent = spent_for_category(transactions, category_name, budget.month)
    return BudgetConsumption(
        spent=spent,
        amount=budget.amount,
        percentage=consumption_percentage(spent, budget.amount),
        status=budget_status(spent, budget.amount),
    )


def evaluate_goal_status(
    current_amount: Decimal, target_amount: Decimal, status: GoalStatus
) -> GoalStatus:
    """Apply the one-way completion rule.

    A goal becomes completed once its current amount reaches the target and
    never reverts to active.
    """
    if status == GoalStatus.COMPLETED or current_amount >= target_amount:
        return GoalStatus.COMPLETED
    return GoalStatus.ACTIVE


def goal_progress(goal: Goal, today: Optional[date] = None) -> GoalProgress:
    """Describe how far a goal is from its target and deadline."""
    today = today or date.today()
    if goal.target_amount == ZERO:
        percentage = HUNDRED
    else:
        percentage = min(goal.current_amount / goal.target_amount * HUNDRED, HUNDRED)
    days_remaining = (goal.deadline - today).days

    if goal.current_amount >= goal.target_amount:
        return GoalProgress(percentage=percentage, days_remaining=days_remaining, label="completed")
    if days_remaining < 0:
        return GoalProgress(percentage=percentage, days_remaining=days_remaining, label="overdue")
    return GoalProgress(
        percentage=percentage,
        days_remaining=days_remaining,
        label=f"days-left: {days_remaining}",
        urgent=days_remaining < URGENT_DAYS,
    )


def apply_contribution(goal: Goal, amount: Decimal) -> Result[Goal]:
    """Add a contribution to a goal.

    Returns:
        ``Ok`` with the updated goal, or ``Err`` wrapping a ValidationError
        when the amount is not positive.
    """
    if amount <= ZERO:
        return Err(
            ValidationError.from_fields({"amount": "Contribution must be greater than zero"})
        )
    current_amount = goal.current_amount + amount
    return Ok(
        replace(
            goal,
            current_amount=current_amount,
            status=evaluate_goal_status(current_amount, goal.target_amount, goal.status),
        )
    )


def monthly_trend(
    transactions: Sequence[Transaction], month_keys: Sequence[str]
) -> list[TrendPoint]:
    """Income and expense totals for each month key, in the order given."""
    points = []
    for month_key in month_keys:
        summary = monthly_summary(transactions, month_key)
        points.append(TrendPoint(month=month_key, income=summary.income, expenses=summary.expenses))
    return points


def savings_rate(summary: MonthlySummary) -> Decimal:
    """Net as a percentage of income (0 when there is no income)."""
    if summary.income == ZERO:
        return ZERO
    return summary.net / summary.income * HUNDRED


def spending_rate(summary: MonthlySummary) -> Decimal:
    """Expenses as a percentage of income (0 when there is no income)."""
    if summary.income == ZERO:
        return ZERO
    return summary.expenses / summary.income * HUNDRED
