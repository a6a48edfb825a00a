"""Transaction domain service."""

from datetime import date, datetime, UTC
from decimal import Decimal
from typing import Any, Optional

from pennywise.database.base import TRANSACTIONS
from pennywise.database.mappers import to_record, transaction_to_domain
from pennywise.domain import aggregation
from pennywise.domain.entities import (
    CategoryAmount,
    MonthlySummary,
    Transaction as TransactionEntity,
    TransactionType,
)
from pennywise.domain.repository import Repository
from pennywise.domain.validation import (
    check_amount,
    check_choice,
    check_date,
    check_text,
    raise_if_errors,
    reject_unknown_fields,
    require_month,
)
from pennywise.utils.date_parser import month_range

UPDATABLE_FIELDS = ("amount", "type", "category", "date", "notes")


def sort_newest_first(transactions: list[TransactionEntity]) -> list[TransactionEntity]:
    """Order by date descending, keeping insertion order among equal dates."""
    in_insertion_order = sorted(transactions, key=lambda txn: txn.id)
    return sorted(in_insertion_order, key=lambda txn: txn.date, reverse=True)


class TransactionService(Repository[TransactionEntity]):
    """Service for managing transactions."""

    collection = TRANSACTIONS
    entity_name = "Transaction"
    to_domain = staticmethod(transaction_to_domain)

    def _validate(self, fields: dict[str, Any]) -> dict[str, Any]:
        errors: dict[str, str] = {}
        cleaned: dict[str, Any] = {}
        if "amount" in fields:
            cleaned["amount"] = check_amount(errors, "amount", fields["amount"])
        if "type" in fields:
            cleaned["type"] = check_choice(errors, "type", fields["type"], TransactionType)
        if "category" in fields:
            cleaned["category"] = check_text(errors, "category", fields["category"])
        if "date" in fields:
            cleaned["date"] = check_date(errors, "date", fields["date"])
        if "notes" in fields:
            notes = fields["notes"]
            cleaned["notes"] = notes.strip() or None if isinstance(notes, str) else None
        raise_if_errors(errors)
        return to_record(cleaned)

    def create_transaction(
        self,
        amount: Decimal,
        type: TransactionType | str,
        category: str,
        date: date | str,
        notes: Optional[str] = None,
    ) -> TransactionEntity:
        """Create a transaction.

        Args:
            amount: Positive amount; the direction comes from ``type``
            type: "income" or "expense"
            category: Category name
            date: Transaction date
            notes: Optional notes

        Returns:
            The stored transaction

        Raises:
            ValidationError: If any field is missing or invalid
        """
        fields = self._validate(
            {"amount": amount, "type": type, "category": category, "date": date, "notes": notes}
        )
        fields["created_at"] = datetime.now(UTC)
        return self._create(fields)

    def get_transaction(self, transaction_id: int) -> TransactionEntity:
        """Get transaction by ID.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        return self._get(transaction_id)

    def list_transactions(self) -> list[TransactionEntity]:
        """List all transactions, most recent first."""
        return sort_newest_first(self._list())

    def list_by_month(self, month_key: str) -> list[TransactionEntity]:
        """List the transactions dated inside a calendar month, most recent first."""
        start_date, end_date = month_range(require_month(month_key))
        return self.list_by_date_range(start_date, end_date)

    def list_by_date_range(self, start_date: date, end_date: date) -> list[TransactionEntity]:
        """List transactions between two dates (inclusive), most recent first."""
        return sort_newest_first(self._list(start_date=start_date, end_date=end_date))

    def update_transaction(self, transaction_id: int, fields: dict[str, Any]) -> TransactionEntity:
        """Merge a partial update into a transaction.

        ``id`` and ``created_at`` in the payload are ignored.

        Raises:
            NotFoundError: If the transaction doesn't exist
            ValidationError: If a field is invalid or cannot be updated
        """
        fields = reject_unknown_fields(fields, UPDATABLE_FIELDS, ignored=("id", "created_at", "version"))
        self._get(transaction_id)
        return self._update(transaction_id, self._validate(fields))

    def delete_transaction(self, transaction_id: int) -> bool:
        """Delete a transaction.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        return self._delete(transaction_id)

    def get_summary_by_month(self, month_key: str) -> MonthlySummary:
        """Income, expenses and net for a month."""
        return aggregation.monthly_summary(self.list_by_month(month_key), month_key)

    def get_category_breakdown(self, month_key: str) -> list[CategoryAmount]:
        """Expense totals per category for a month."""
        return aggregation.category_breakdown(self.list_by_month(month_key), month_key)
