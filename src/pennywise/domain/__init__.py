"""Domain layer for pennywise application."""

from pennywise.domain.transaction import TransactionService
from pennywise.domain.category import CategoryService
from pennywise.domain.budget import BudgetService
from pennywise.domain.goal import GoalService
from pennywise.domain.views import ViewAssembler

__all__ = [
    "TransactionService",
    "CategoryService",
    "BudgetService",
    "GoalService",
    "ViewAssembler",
]
