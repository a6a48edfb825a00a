"""Tests for the budget service and commands."""

from datetime import date
from decimal import Decimal

import pytest

from pennywise.cli.main import cli
from pennywise.database.base import BUDGETS
from pennywise.domain.budget import BudgetService
from pennywise.domain.category import CategoryService
from pennywise.domain.entities import BudgetStatus
from pennywise.domain.errors import ConflictError, NotFoundError, ValidationError
from pennywise.domain.transaction import TransactionService


class TestBudgetService:
    """Tests for BudgetService."""

    def test_create_budget(self, budget_service, sample_categories):
        """Test creating a budget starts with nothing spent."""
        food = sample_categories["Food"]

        budget = budget_service.create_budget(food.id, "2024-03", Decimal("400"))

        assert budget.id == 1
        assert budget.category_id == food.id
        assert budget.month == "2024-03"
        assert budget.amount == Decimal("400")
        assert budget.spent == Decimal("0")

    def test_create_duplicate_budget(self, budget_service, sample_categories):
        """Test one budget per category and month."""
        food = sample_categories["Food"]
        budget_service.create_budget(food.id, "2024-03", Decimal("400"))

        with pytest.raises(ConflictError):
            budget_service.create_budget(food.id, "2024-03", Decimal("100"))

        assert len(budget_service.list_budgets()) == 1

    def test_same_category_other_month(self, budget_service, sample_categories):
        """Test that another month gets its own budget."""
        food = sample_categories["Food"]
        budget_service.create_budget(food.id, "2024-03", Decimal("400"))
        budget_service.create_budget(food.id, "2024-04", Decimal("450"))

        assert [b.month for b in budget_service.list_by_month("2024-04")] == ["2024-04"]

    def test_create_with_missing_category(self, budget_service):
        """Test that the linked category must exist."""
        with pytest.raises(ValidationError) as exc_info:
            budget_service.create_budget(42, "2024-03", Decimal("400"))
        assert exc_info.value.errors["category_id"] == "Category 42 not found"

    @pytest.mark.parametrize(
        "month, amount, bad_field",
        [
            ("2024-3", Decimal("400"), "month"),
            ("2024-03", Decimal("0"), "amount"),
            ("2024-03", Decimal("-1"), "amount"),
        ],
    )
    def test_create_invalid(self, budget_service, sample_categories, month, amount, bad_field):
        """Test field validation on create."""
        with pytest.raises(ValidationError) as exc_info:
            budget_service.create_budget(sample_categories["Food"].id, month, amount)
        assert bad_field in exc_info.value.errors

    def test_update_budget_ignores_spent(self, budget_service, sample_categories):
        """Test that the cached spent value cannot be written directly."""
        budget = budget_service.create_budget(sample_categories["Food"].id, "2024-03", Decimal("400"))

        updated = budget_service.update_budget(budget.id, {"amount": Decimal("500"), "spent": Decimal("99")})

        assert updated.amount == Decimal("500")
        assert updated.spent == Decimal("0")

    def test_update_into_duplicate(self, budget_service, sample_categories):
        """Test that moving a budget onto a taken month conflicts."""
        food = sample_categories["Food"]
        budget_service.create_budget(food.id, "2024-03", Decimal("400"))
        april = budget_service.create_budget(food.id, "2024-04", Decimal("400"))

        with pytest.raises(ConflictError):
            budget_service.update_budget(april.id, {"month": "2024-03"})

    def test_update_not_found(self, budget_service):
        """Test updating a missing budget."""
        with pytest.raises(NotFoundError):
            budget_service.update_budget(3, {"amount": Decimal("1")})

    def test_delete_budget(self, budget_service, sample_categories):
        """Test deleting a budget."""
        budget = budget_service.create_budget(sample_categories["Food"].id, "2024-03", Decimal("400"))
        budget_service.delete_budget(budget.id)

        with pytest.raises(NotFoundError):
            budget_service.get_budget(budget.id)

    def test_consumption(self, budget_service, sample_categories, march_transactions):
        """Test consumption against March spending."""
        budget = budget_service.create_budget(sample_categories["Food"].id, "2024-03", Decimal("200"))

        consumption = budget_service.consumption(budget)

        assert consumption.spent == Decimal("160.50")
        assert consumption.status == BudgetStatus.NEAR_LIMIT

    def test_consumption_over(self, budget_service, sample_categories, march_transactions):
        """Test a budget that has been exceeded."""
        budget = budget_service.create_budget(sample_categories["Bills"].id, "2024-03", Decimal("900"))
        assert budget_service.consumption(budget).status == BudgetStatus.OVER

    def test_refresh_spent(self, budget_service, sample_categories, march_transactions):
        """Test recomputing and storing the cached spent values."""
        food = budget_service.create_budget(sample_categories["Food"].id, "2024-03", Decimal("200"))
        budget_service.create_budget(sample_categories["Shopping"].id, "2024-03", Decimal("100"))

        refreshed = {b.category_id: b.spent for b in budget_service.refresh_spent("2024-03")}

        assert refreshed[sample_categories["Food"].id] == Decimal("160.50")
        assert refreshed[sample_categories["Shopping"].id] == Decimal("0")
        assert budget_service.get_budget(food.id).spent == Decimal("160.50")

    def test_reads_follow_transaction_writes(self, budget_service, transaction_service, sample_categories):
        """Test that spent reflects transactions booked after the budget."""
        food = sample_categories["Food"]
        budget = budget_service.create_budget(food.id, "2024-03", Decimal("200"))
        txn = transaction_service.create_transaction(
            amount=Decimal("180"), type="expense", category="Food", date=date(2024, 3, 4)
        )

        assert budget_service.get_budget(budget.id).spent == Decimal("180")
        assert [b.spent for b in budget_service.list_by_month("2024-03")] == [Decimal("180")]
        assert [b.spent for b in budget_service.list_budgets()] == [Decimal("180")]

        transaction_service.update_transaction(txn.id, {"amount": Decimal("20")})
        assert budget_service.get_budget(budget.id).spent == Decimal("20")

        transaction_service.delete_transaction(txn.id)
        assert budget_service.get_budget(budget.id).spent == Decimal("0")

    def test_create_counts_existing_spending(self, budget_service, sample_categories, march_transactions):
        """Test that a new budget starts from the month's existing expenses."""
        budget = budget_service.create_budget(sample_categories["Food"].id, "2024-03", Decimal("200"))
        assert budget.spent == Decimal("160.50")

    def test_refresh_spent_stores_stale_cache(self, db, budget_service, transaction_service, sample_categories):
        """Test that refreshing writes the live total over an outdated cache."""
        budget = budget_service.create_budget(sample_categories["Food"].id, "2024-03", Decimal("200"))
        transaction_service.create_transaction(
            amount=Decimal("45.25"), type="expense", category="Food", date=date(2024, 3, 9)
        )
        assert db.get_record(BUDGETS, budget.id)["spent"] == Decimal("0")

        refreshed = budget_service.refresh_spent("2024-03")

        assert [b.spent for b in refreshed] == [Decimal("45.25")]
        assert db.get_record(BUDGETS, budget.id)["spent"] == Decimal("45.25")
        assert refreshed[0].version == budget.version + 1


class TestBudgetCommands:
    """Tests for the budget CLI commands."""

    def test_set_creates_then_updates(self, cli_runner, memory_db):
        """Test that setting a budget twice changes the amount."""
        CategoryService(memory_db).seed_defaults()

        result = cli_runner.invoke(
            cli, ["budget", "set", "Food", "--amount", "200", "--month", "2024-03"], obj={"db": memory_db}
        )
        assert result.exit_code == 0
        assert "Created budget 1" in result.output

        result = cli_runner.invoke(
            cli, ["budget", "set", "Food", "--amount", "250", "--month", "2024-03"], obj={"db": memory_db}
        )
        assert result.exit_code == 0
        assert "Updated budget 1" in result.output
        assert BudgetService(memory_db).get_budget(1).amount == Decimal("250")

    def test_set_unknown_category(self, cli_runner, memory_db):
        """Test setting a budget for a missing category."""
        result = cli_runner.invoke(cli, ["budget", "set", "Nope", "--amount", "10"], obj={"db": memory_db})

        assert result.exit_code == 1
        assert "Expense category 'Nope' not found" in result.output

    def test_list_budgets(self, cli_runner, memory_db):
        """Test the budget overview table."""
        categories = CategoryService(memory_db)
        categories.seed_defaults()
        food = categories.get_by_name("Food")
        BudgetService(memory_db).create_budget(food.id, "2024-03", Decimal("200"))
        TransactionService(memory_db).create_transaction(
            amount=Decimal("170"), type="expense", category="Food", date=date(2024, 3, 4)
        )

        result = cli_runner.invoke(cli, ["budget", "list", "--month", "2024-03"], obj={"db": memory_db})

        assert result.exit_code == 0
        assert "March 2024" in result.output
        assert "Near Limit" in result.output
        assert "85.0%" in result.output

    def test_list_no_budgets(self, cli_runner, memory_db):
        """Test a month without budgets."""
        result = cli_runner.invoke(cli, ["budget", "list", "--month", "2024-03"], obj={"db": memory_db})

        assert result.exit_code == 0
        assert "No budgets set for this month." in result.output

    def test_refresh(self, cli_runner, memory_db):
        """Test refreshing cached spent values."""
        categories = CategoryService(memory_db)
        categories.seed_defaults()
        BudgetService(memory_db).create_budget(categories.get_by_name("Food").id, "2024-03", Decimal("200"))

        result = cli_runner.invoke(cli, ["budget", "refresh", "--month", "2024-03"], obj={"db": memory_db})

        assert result.exit_code == 0
        assert "Refreshed 1 budget(s) for 2024-03" in result.output
