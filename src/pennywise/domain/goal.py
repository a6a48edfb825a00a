"""Savings goal domain service."""

import logging
import threading
import weakref
from datetime import date, datetime, UTC
from decimal import Decimal
from typing import Any, Optional

from pennywise.database.base import GOALS, Database
from pennywise.database.mappers import goal_to_domain, to_record
from pennywise.domain import aggregation
from pennywise.domain.entities import Goal as GoalEntity, GoalProgress, GoalStatus
from pennywise.domain.errors import ConflictError
from pennywise.domain.repository import Repository
from pennywise.domain.validation import (
    check_amount,
    check_date,
    check_text,
    raise_if_errors,
    reject_unknown_fields,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "target_amount", "current_amount", "deadline")

# Attempts at a compare-and-set write before giving up
MAX_WRITE_ATTEMPTS = 5


def sort_by_deadline(goals: list[GoalEntity]) -> list[GoalEntity]:
    """Order goals by deadline, soonest first."""
    return sorted(goals, key=lambda goal: (goal.deadline, goal.id))


class GoalService(Repository[GoalEntity]):
    """Service for managing savings goals.

    Writes that depend on the stored amounts (updates and contributions) run
    under a per-goal lock and are stored with a version compare-and-set, so
    concurrent contributions to one goal are never lost.
    """

    collection = GOALS
    entity_name = "Goal"
    to_domain = staticmethod(goal_to_domain)

    _locks_guard = threading.Lock()
    _locks: "weakref.WeakKeyDictionary[Database, dict[int, threading.Lock]]" = weakref.WeakKeyDictionary()

    def _lock_for(self, goal_id: int) -> threading.Lock:
        # Services sharing a store share the lock
        with self._locks_guard:
            locks = self._locks.setdefault(self.db, {})
            lock = locks.get(goal_id)
            if lock is None:
                lock = locks[goal_id] = threading.Lock()
            return lock

    def _validate(self, fields: dict[str, Any]) -> dict[str, Any]:
        errors: dict[str, str] = {}
        cleaned: dict[str, Any] = {}
        if "name" in fields:
            cleaned["name"] = check_text(errors, "name", fields["name"])
        if "target_amount" in fields:
            cleaned["target_amount"] = check_amount(errors, "target_amount", fields["target_amount"])
        if "current_amount" in fields:
            cleaned["current_amount"] = check_amount(
                errors, "current_amount", fields["current_amount"], allow_zero=True
            )
        if "deadline" in fields:
            cleaned["deadline"] = check_date(errors, "deadline", fields["deadline"])
        raise_if_errors(errors)
        return cleaned

    def create_goal(
        self,
        name: str,
        target_amount: Decimal,
        deadline: date | str,
        current_amount: Decimal = Decimal("0"),
    ) -> GoalEntity:
        """Create a savings goal.

        Args:
            name: Goal name
            target_amount: Positive target
            deadline: Target date
            current_amount: Amount already saved (default 0)

        Returns:
            The stored goal; completed already if the target is met

        Raises:
            ValidationError: If a field is missing or invalid
        """
        fields = self._validate(
            {
                "name": name,
                "target_amount": target_amount,
                "deadline": deadline,
                "current_amount": current_amount,
            }
        )
        fields["status"] = aggregation.evaluate_goal_status(
            fields["current_amount"], fields["target_amount"], GoalStatus.ACTIVE
        )
        fields["created_at"] = datetime.now(UTC)
        return self._create(to_record(fields))

    def get_goal(self, goal_id: int) -> GoalEntity:
        """Get goal by ID.

        Raises:
            NotFoundError: If the goal doesn't exist
        """
        return self._get(goal_id)

    def list_goals(self) -> list[GoalEntity]:
        """List all goals, soonest deadline first."""
        return sort_by_deadline(self._list())

    def list_active(self) -> list[GoalEntity]:
        """List active goals, soonest deadline first."""
        return sort_by_deadline(self._list(filters={"status": GoalStatus.ACTIVE.value}))

    def update_goal(self, goal_id: int, fields: dict[str, Any]) -> GoalEntity:
        """Merge a partial update into a goal and re-evaluate completion.

        ``id`` and ``created_at`` in the payload are ignored; ``status`` is
        derived and cannot be set.

        Raises:
            NotFoundError: If the goal doesn't exist
            ValidationError: If a field is invalid or cannot be updated
        """
        fields = reject_unknown_fields(fields, UPDATABLE_FIELDS, ignored=("id", "created_at", "version"))
        cleaned = self._validate(fields)

        def merge(goal: GoalEntity) -> dict[str, Any]:
            status = aggregation.evaluate_goal_status(
                cleaned.get("current_amount", goal.current_amount),
                cleaned.get("target_amount", goal.target_amount),
                goal.status,
            )
            return to_record({**cleaned, "status": status})

        return self._write_with_retry(goal_id, merge)

    def add_contribution(self, goal_id: int, amount: Decimal) -> GoalEntity:
        """Add money to a goal, completing it when the target is reached.

        Raises:
            NotFoundError: If the goal doesn't exist
            ValidationError: If the amount is not a positive number
            ConflictError: If the goal kept changing under concurrent writers
        """
        errors: dict[str, str] = {}
        check_amount(errors, "amount", amount, allow_zero=True)
        raise_if_errors(errors)
        amount = amount if isinstance(amount, Decimal) else Decimal(str(amount))

        def contribute(goal: GoalEntity) -> dict[str, Any]:
            updated = aggregation.apply_contribution(goal, amount).unwrap()
            return to_record({"current_amount": updated.current_amount, "status": updated.status})

        goal = self._write_with_retry(goal_id, contribute)
        logger.info("Added %s to goal %s (now %s, %s)", amount, goal_id, goal.current_amount, goal.status.value)
        return goal

    def _write_with_retry(self, goal_id: int, build_fields) -> GoalEntity:
        """Read, derive new fields and compare-and-set, retrying on conflicts."""
        with self._lock_for(goal_id):
            for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
                goal = self._get(goal_id)
                fields = build_fields(goal)
                try:
                    return self._update(goal_id, fields, expected_version=goal.version)
                except ConflictError:
                    logger.debug("Goal %s changed during write (attempt %d)", goal_id, attempt)
            raise ConflictError(f"Goal {goal_id} kept changing; gave up after {MAX_WRITE_ATTEMPTS} attempts")

    def delete_goal(self, goal_id: int) -> bool:
        """Delete a goal.

        Raises:
            NotFoundError: If the goal doesn't exist
        """
        deleted = self._delete(goal_id)
        with self._locks_guard:
            self._locks.get(self.db, {}).pop(goal_id, None)
        return deleted

    def progress(self, goal: GoalEntity, today: Optional[date] = None) -> GoalProgress:
        """Progress of a goal towards its target and deadline."""
        return aggregation.goal_progress(goal, today=today)
