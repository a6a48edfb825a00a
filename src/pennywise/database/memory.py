"""In-memory record store."""

import copy
import logging
import threading
from datetime import date
from typing import Any, Iterable, Optional

from pennywise.database.base import (
    COLLECTIONS,
    UNIQUE_KEYS,
    Database,
    check_collection,
    writable_fields,
)
from pennywise.domain.errors import ConflictError, stale_version

logger = logging.getLogger(__name__)


class InMemoryDatabase(Database):
    """Record store that keeps every collection in process memory.

    Each instance owns its collections; nothing is shared between instances.
    Every operation holds an internal lock, so each call observes and leaves
    a consistent snapshot.
    """

    def __init__(self, seed: Optional[dict[str, Iterable[dict[str, Any]]]] = None):
        """Initialize the store.

        Args:
            seed: Optional initial records per collection. Seed records keep
                their ids and default to version 1.
        """
        self._collections: dict[str, dict[int, dict[str, Any]]] = {
            name: {} for name in COLLECTIONS
        }
        self._lock = threading.RLock()
        for collection, records in (seed or {}).items():
            check_collection(collection)
            for record in records:
                stored = copy.deepcopy(dict(record))
                stored.setdefault("version", 1)
                self._collections[collection][int(stored["id"])] = stored

    def connect(self) -> None:
        """Connect to the store."""
        # Nothing to connect to
        pass

    def disconnect(self) -> None:
        """Disconnect from the store."""
        pass

    def initialize_schema(self) -> None:
        """Initialize store schema."""
        pass

    def _records(self, collection: str) -> dict[int, dict[str, Any]]:
        check_collection(collection)
        return self._collections[collection]

    def _check_unique(
        self, collection: str, candidate: dict[str, Any], record_id: Optional[int] = None
    ) -> None:
        key_fields = UNIQUE_KEYS.get(collection)
        if not key_fields:
            return
        key = tuple(candidate.get(field) for field in key_fields)
        for other_id, other in self._collections[collection].items():
            if other_id == record_id:
                continue
            if tuple(other.get(field) for field in key_fields) == key:
                raise ConflictError(
                    f"Duplicate {', '.join(key_fields)} {key} in '{collection}'"
                )

    def list_records(
        self,
        collection: str,
        filters: Optional[dict[str, Any]] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[dict[str, Any]]:
        """List records with optional exact-match and date filters."""
        with self._lock:
            records = self._records(collection)
            result = []
            for record_id in sorted(records):
                record = records[record_id]
                if filters and any(record.get(k) != v for k, v in filters.items()):
                    continue
                if start_date is not None and record.get("date") < start_date:
                    continue
                if end_date is not None and record.get("date") > end_date:
                    continue
                result.append(copy.deepcopy(record))
            return result

    def get_record(self, collection: str, record_id: int) -> Optional[dict[str, Any]]:
        """Get record by ID."""
        with self._lock:
            record = self._records(collection).get(record_id)
            return copy.deepcopy(record) if record is not None else None

    def create_record(self, collection: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Create a record with the next free id."""
        with self._lock:
            records = self._records(collection)
            record = copy.deepcopy(writable_fields(fields))
            if "created_at" in fields:
                record["created_at"] = fields["created_at"]
            self._check_unique(collection, record)
            record["id"] = max(records, default=0) + 1
            record["version"] = 1
            records[record["id"]] = record
            logger.debug("Created %s record %s", collection, record["id"])
            return copy.deepcopy(record)

    def update_record(
        self,
        collection: str,
        record_id: int,
        fields: dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> Optional[dict[str, Any]]:
        """Merge fields into a record, optionally as a compare-and-set."""
        with self._lock:
            records = self._records(collection)
            current = records.get(record_id)
            if current is None:
                return None
            if expected_version is not None and current["version"] != expected_version:
                raise ConflictError(
                    stale_version(collection, record_id, expected_version, current["version"])
                )
            updated = {**current, **copy.deepcopy(writable_fields(fields))}
            self._check_unique(collection, updated, record_id=record_id)
            updated["version"] = current["version"] + 1
            records[record_id] = updated
            return copy.deepcopy(updated)

    def delete_record(self, collection: str, record_id: int) -> bool:
        """Delete a record."""
        with self._lock:
            records = self._records(collection)
            if record_id not in records:
                return False
            del records[record_id]
            return True
