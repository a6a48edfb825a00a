"""Abstract record store interface.

Every entity collection is reached through the same small CRUD contract.
Records are plain dicts keyed by field name; conversion to domain entities
happens in ``pennywise.database.mappers``.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Optional

TRANSACTIONS = "transactions"
CATEGORIES = "categories"
BUDGETS = "budgets"
GOALS = "goals"

COLLECTIONS = (TRANSACTIONS, CATEGORIES, BUDGETS, GOALS)

# Fields a write payload can never overwrite
IMMUTABLE_FIELDS = frozenset({"id", "created_at", "version"})

# Field combinations that must be unique within a collection
UNIQUE_KEYS: dict[str, tuple[str, ...]] = {
    BUDGETS: ("category_id", "month"),
}


def check_collection(collection: str) -> None:
    """Raise ValueError for an unknown collection name."""
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection '{collection}'")


def writable_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Drop immutable fields from a write payload."""
    return {key: value for key, value in fields.items() if key not in IMMUTABLE_FIELDS}


class Database(ABC):
    """Abstract record store for pennywise."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the store."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the store."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize the store schema (create tables) if it has one."""
        pass

    @abstractmethod
    def list_records(
        self,
        collection: str,
        filters: Optional[dict[str, Any]] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[dict[str, Any]]:
        """List records of a collection.

        Args:
            collection: Collection name
            filters: Optional exact-match filters by field
            start_date: Optional inclusive lower bound on the ``date`` field
            end_date: Optional inclusive upper bound on the ``date`` field

        Returns:
            Records in insertion (id) order
        """
        pass

    @abstractmethod
    def get_record(self, collection: str, record_id: int) -> Optional[dict[str, Any]]:
        """Get a record by ID, or None if it does not exist."""
        pass

    @abstractmethod
    def create_record(self, collection: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Create a record.

        The store assigns ``id`` (one more than the largest existing id) and
        ``version`` (1). Returns the stored record.

        Raises:
            ConflictError: If a unique key is already taken
        """
        pass

    @abstractmethod
    def update_record(
        self,
        collection: str,
        record_id: int,
        fields: dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> Optional[dict[str, Any]]:
        """Merge ``fields`` into a record and bump its version.

        ``id``, ``created_at`` and ``version`` in ``fields`` are ignored.

        Args:
            collection: Collection name
            record_id: Record ID
            fields: Partial record
            expected_version: If given, the update only applies when the stored
                version still equals it (compare-and-set)

        Returns:
            Updated record, or None if it does not exist

        Raises:
            ConflictError: On a version mismatch or unique key clash
        """
        pass

    @abstractmethod
    def delete_record(self, collection: str, record_id: int) -> bool:
        """Delete a record. Returns False if it did not exist."""
        pass
