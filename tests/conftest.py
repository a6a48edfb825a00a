"""Shared pytest fixtures for pennywise tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal

import pytest

from pennywise.database.factories import create_sqlite_database
from pennywise.database.memory import InMemoryDatabase
from pennywise.domain.budget import BudgetService
from pennywise.domain.category import CategoryService
from pennywise.domain.goal import GoalService
from pennywise.domain.transaction import TransactionService
from pennywise.domain.views import ViewAssembler


@pytest.fixture
def temp_db():
    """Create a temporary SQLite database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def memory_db():
    """Create an empty in-memory record store."""
    db = InMemoryDatabase()
    db.connect()
    yield db
    db.disconnect()


@pytest.fixture(params=["memory", "sqlite"])
def db(request):
    """Run a test against every local record store."""
    if request.param == "memory":
        return request.getfixturevalue("memory_db")
    return request.getfixturevalue("temp_db")


@pytest.fixture
def transaction_service(db):
    """Create a TransactionService."""
    return TransactionService(db)


@pytest.fixture
def category_service(db):
    """Create a CategoryService."""
    return CategoryService(db)


@pytest.fixture
def budget_service(db):
    """Create a BudgetService."""
    return BudgetService(db)


@pytest.fixture
def goal_service(db):
    """Create a GoalService."""
    return GoalService(db)


@pytest.fixture
def assembler(db):
    """Create a ViewAssembler over the test store."""
    return ViewAssembler.from_database(db)


@pytest.fixture
def sample_categories(category_service):
    """Seed the default categories and return them by name."""
    category_service.seed_defaults()
    return {cat.name: cat for cat in category_service.list_categories()}


@pytest.fixture
def march_transactions(transaction_service):
    """Create a small set of transactions around March 2024."""
    rows = [
        (Decimal("3000.00"), "income", "Salary", date(2024, 3, 1)),
        (Decimal("40.00"), "expense", "Food", date(2024, 3, 5)),
        (Decimal("120.50"), "expense", "Food", date(2024, 3, 18)),
        (Decimal("60.00"), "expense", "Transport", date(2024, 3, 20)),
        (Decimal("900.00"), "expense", "Bills", date(2024, 3, 31)),
        (Decimal("75.00"), "expense", "Food", date(2024, 2, 29)),
        (Decimal("500.00"), "income", "Other Income", date(2024, 4, 1)),
    ]
    return [
        transaction_service.create_transaction(amount=amount, type=txn_type, category=category, date=txn_date)
        for amount, txn_type, category, txn_date in rows
    ]


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
