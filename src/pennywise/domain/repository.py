"""Shared CRUD plumbing for the entity services."""

import logging
from datetime import date
from typing import Any, Callable, Generic, Optional, TypeVar

from pennywise.database.base import Database
from pennywise.domain.errors import NotFoundError, StoreUnavailableError

logger = logging.getLogger(__name__)

E = TypeVar("E")


class Repository(Generic[E]):
    """Base class binding one record collection to its domain entity.

    Read paths that return collections degrade to an empty list when the store
    is unavailable so that dependent views can still render. Single-record
    reads and all writes propagate the failure.
    """

    collection: str
    entity_name: str
    to_domain: Callable[[dict[str, Any]], E]

    def __init__(self, db: Database):
        """Initialize the service.

        Args:
            db: Database instance
        """
        self.db = db

    def _not_found(self, record_id: int) -> NotFoundError:
        return NotFoundError(f"{self.entity_name} {record_id} not found")

    def _list(
        self,
        filters: Optional[dict[str, Any]] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[E]:
        try:
            records = self.db.list_records(
                self.collection, filters=filters, start_date=start_date, end_date=end_date
            )
        except StoreUnavailableError as e:
            logger.warning("Listing %s failed, returning no results: %s", self.collection, e)
            return []
        return [self.to_domain(record) for record in records]

    def _find(self, record_id: int) -> Optional[E]:
        record = self.db.get_record(self.collection, record_id)
        return self.to_domain(record) if record is not None else None

    def _get(self, record_id: int) -> E:
        entity = self._find(record_id)
        if entity is None:
            raise self._not_found(record_id)
        return entity

    def _create(self, fields: dict[str, Any]) -> E:
        record = self.db.create_record(self.collection, fields)
        entity = self.to_domain(record)
        logger.info("Created %s %s", self.entity_name.lower(), record["id"])
        return entity

    def _update(
        self, record_id: int, fields: dict[str, Any], expected_version: Optional[int] = None
    ) -> E:
        record = self.db.update_record(
            self.collection, record_id, fields, expected_version=expected_version
        )
        if record is None:
            raise self._not_found(record_id)
        return self.to_domain(record)

    def _delete(self, record_id: int) -> bool:
        if not self.db.delete_record(self.collection, record_id):
            raise self._not_found(record_id)
        logger.info("Deleted %s %s", self.entity_name.lower(), record_id)
        return True
