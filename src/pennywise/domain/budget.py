"""Budget domain service."""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Any, Optional

from pennywise.database.base import BUDGETS, Database
from pennywise.database.mappers import budget_to_domain
from pennywise.domain import aggregation
from pennywise.domain.category import CategoryService
from pennywise.domain.entities import Budget as BudgetEntity, BudgetConsumption, Transaction
from pennywise.domain.errors import ConflictError, duplicate_budget
from pennywise.domain.repository import Repository
from pennywise.domain.transaction import TransactionService
from pennywise.domain.validation import (
    check_amount,
    check_month,
    raise_if_errors,
    reject_unknown_fields,
    require_month,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("category_id", "month", "amount")


class BudgetService(Repository[BudgetEntity]):
    """Service for managing monthly budgets.

    A category has at most one budget per month. Budgets are returned with
    ``spent`` recomputed from the month's transactions; the stored value is a
    cache written on create and by ``refresh_spent``.
    """

    collection = BUDGETS
    entity_name = "Budget"
    to_domain = staticmethod(budget_to_domain)

    def __init__(self, db: Database):
        super().__init__(db)
        self.categories = CategoryService(db)
        self.transactions = TransactionService(db)

    def _validate(self, fields: dict[str, Any]) -> dict[str, Any]:
        errors: dict[str, str] = {}
        cleaned: dict[str, Any] = {}
        if "category_id" in fields:
            category_id = fields["category_id"]
            if isinstance(category_id, bool) or not isinstance(category_id, int):
                errors["category_id"] = "Please select a category"
            elif self.categories.find_category(category_id) is None:
                errors["category_id"] = f"Category {category_id} not found"
            else:
                cleaned["category_id"] = category_id
        if "month" in fields:
            cleaned["month"] = check_month(errors, "month", fields["month"])
        if "amount" in fields:
            cleaned["amount"] = check_amount(errors, "amount", fields["amount"])
        raise_if_errors(errors)
        return cleaned

    def _check_unique(self, category_id: int, month: str, exclude_id: Optional[int] = None) -> None:
        for budget in self._list(filters={"category_id": category_id, "month": month}):
            if budget.id != exclude_id:
                raise ConflictError(duplicate_budget(category_id, month))

    def _with_spent(self, budgets: list[BudgetEntity]) -> list[BudgetEntity]:
        """Replace the cached ``spent`` of each budget with the live total."""
        if not budgets:
            return []
        names = {category.id: category.name for category in self.categories.list_categories()}
        by_month: dict[str, list[Transaction]] = {}
        result = []
        for budget in budgets:
            if budget.month not in by_month:
                by_month[budget.month] = self.transactions.list_by_month(budget.month)
            consumption = aggregation.budget_consumption(
                budget, by_month[budget.month], names.get(budget.category_id)
            )
            result.append(replace(budget, spent=consumption.spent))
        return result

    def create_budget(self, category_id: int, month: str, amount: Decimal) -> BudgetEntity:
        """Create a budget for a category and month.

        Args:
            category_id: ID of an existing category
            month: Month key ("YYYY-MM")
            amount: Positive allocation

        Returns:
            The stored budget, ``spent`` covering the month's existing expenses

        Raises:
            ValidationError: If a field is invalid or the category is missing
            ConflictError: If the category already has a budget that month
        """
        fields = self._validate({"category_id": category_id, "month": month, "amount": amount})
        self._check_unique(fields["category_id"], fields["month"])
        pending = BudgetEntity(id=0, **fields)
        fields["spent"] = self._with_spent([pending])[0].spent
        return self._create(fields)

    def get_budget(self, budget_id: int) -> BudgetEntity:
        """Get budget by ID.

        Raises:
            NotFoundError: If the budget doesn't exist
        """
        return self._with_spent([self._get(budget_id)])[0]

    def list_budgets(self) -> list[BudgetEntity]:
        """List all budgets."""
        return self._with_spent(self._list())

    def list_by_month(self, month_key: str) -> list[BudgetEntity]:
        """List the budgets of one month."""
        return self._with_spent(self._list(filters={"month": require_month(month_key)}))

    def update_budget(self, budget_id: int, fields: dict[str, Any]) -> BudgetEntity:
        """Merge a partial update into a budget.

        ``id`` and the derived ``spent`` value in the payload are ignored.

        Raises:
            NotFoundError: If the budget doesn't exist
            ValidationError: If a field is invalid or cannot be updated
            ConflictError: If the change collides with another budget
        """
        fields = reject_unknown_fields(fields, UPDATABLE_FIELDS, ignored=("id", "spent", "version"))
        current = self._get(budget_id)
        cleaned = self._validate(fields)
        if "category_id" in cleaned or "month" in cleaned:
            self._check_unique(
                cleaned.get("category_id", current.category_id),
                cleaned.get("month", current.month),
                exclude_id=budget_id,
            )
        return self._with_spent([self._update(budget_id, cleaned)])[0]

    def delete_budget(self, budget_id: int) -> bool:
        """Delete a budget.

        Raises:
            NotFoundError: If the budget doesn't exist
        """
        return self._delete(budget_id)

    def consumption(
        self, budget: BudgetEntity, transactions: Optional[list[Transaction]] = None
    ) -> BudgetConsumption:
        """Compute spent-vs-allocated for a budget from current transactions."""
        if transactions is None:
            transactions = self.transactions.list_by_month(budget.month)
        category = self.categories.find_category(budget.category_id)
        return aggregation.budget_consumption(
            budget, transactions, category.name if category is not None else None
        )

    def refresh_spent(self, month_key: str) -> list[BudgetEntity]:
        """Recompute and store the cached ``spent`` of every budget in a month.

        Returns:
            The month's budgets with fresh ``spent`` values
        """
        cached = self._list(filters={"month": require_month(month_key)})
        refreshed = []
        for stored, live in zip(cached, self._with_spent(cached)):
            if live.spent != stored.spent:
                logger.debug("Budget %s spent %s -> %s", stored.id, stored.spent, live.spent)
                live = replace(live, version=self._update(stored.id, {"spent": live.spent}).version)
            refreshed.append(live)
        return refreshed
