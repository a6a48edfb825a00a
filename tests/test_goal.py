"""Tests for the savings goal service and commands."""

import gc
import weakref
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from decimal import Decimal

import pytest

from pennywise.cli.main import cli
from pennywise.database.base import GOALS
from pennywise.database.memory import InMemoryDatabase
from pennywise.domain.entities import GoalStatus
from pennywise.domain.errors import ConflictError, NotFoundError, ValidationError
from pennywise.domain.goal import MAX_WRITE_ATTEMPTS, GoalService


class RacingDatabase(InMemoryDatabase):
    """Store where another writer touches a goal just before each of our writes."""

    def __init__(self, races: int):
        super().__init__()
        self.races = races

    def update_record(self, collection, record_id, fields, expected_version=None):
        if collection == GOALS and expected_version is not None and self.races > 0:
            self.races -= 1
            super().update_record(collection, record_id, {"name": "Renamed elsewhere"})
        return super().update_record(collection, record_id, fields, expected_version=expected_version)


@pytest.fixture
def emergency_fund(goal_service):
    """Create a goal that is 90% funded."""
    return goal_service.create_goal(
        name="Emergency fund",
        target_amount=Decimal("1000"),
        deadline=date(2030, 1, 1),
        current_amount=Decimal("900"),
    )


class TestGoalService:
    """Tests for GoalService."""

    def test_create_goal(self, goal_service):
        """Test creating a goal."""
        goal = goal_service.create_goal(
            name="Vacation", target_amount=Decimal("2500"), deadline="2025-07-01"
        )

        assert goal.id == 1
        assert goal.name == "Vacation"
        assert goal.target_amount == Decimal("2500")
        assert goal.current_amount == Decimal("0")
        assert goal.deadline == date(2025, 7, 1)
        assert goal.status == GoalStatus.ACTIVE

    def test_create_goal_already_met(self, goal_service):
        """Test that a goal created at its target is completed."""
        goal = goal_service.create_goal(
            name="Done", target_amount=Decimal("100"), deadline=date(2030, 1, 1), current_amount=Decimal("100")
        )
        assert goal.status == GoalStatus.COMPLETED

    @pytest.mark.parametrize(
        "kwargs, bad_field",
        [
            ({"name": " ", "target_amount": Decimal("10"), "deadline": date(2030, 1, 1)}, "name"),
            ({"name": "Car", "target_amount": Decimal("0"), "deadline": date(2030, 1, 1)}, "target_amount"),
            ({"name": "Car", "target_amount": Decimal("10"), "deadline": "someday"}, "deadline"),
            (
                {"name": "Car", "target_amount": Decimal("10"), "deadline": date(2030, 1, 1), "current_amount": Decimal("-1")},
                "current_amount",
            ),
        ],
    )
    def test_create_invalid(self, goal_service, kwargs, bad_field):
        """Test field validation on create."""
        with pytest.raises(ValidationError) as exc_info:
            goal_service.create_goal(**kwargs)
        assert bad_field in exc_info.value.errors

    def test_contribution_completes_goal(self, goal_service, emergency_fund):
        """Test that reaching the target completes the goal."""
        goal = goal_service.add_contribution(emergency_fund.id, Decimal("150"))

        assert goal.current_amount == Decimal("1050")
        assert goal.status == GoalStatus.COMPLETED
        assert goal_service.get_goal(emergency_fund.id) == goal

    def test_contribution_below_target(self, goal_service, emergency_fund):
        """Test a partial contribution."""
        goal = goal_service.add_contribution(emergency_fund.id, Decimal("50"))

        assert goal.current_amount == Decimal("950")
        assert goal.status == GoalStatus.ACTIVE

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-25"), "abc", Decimal("0.005")])
    def test_invalid_contribution(self, goal_service, emergency_fund, amount):
        """Test that non-positive and malformed contributions change nothing."""
        with pytest.raises(ValidationError):
            goal_service.add_contribution(emergency_fund.id, amount)

        assert goal_service.get_goal(emergency_fund.id) == emergency_fund

    def test_contribution_to_missing_goal(self, goal_service):
        """Test contributing to a goal that does not exist."""
        with pytest.raises(NotFoundError, match="Goal 8 not found"):
            goal_service.add_contribution(8, Decimal("10"))

    def test_completion_survives_target_increase(self, goal_service, emergency_fund):
        """Test that completion is never reverted."""
        goal_service.add_contribution(emergency_fund.id, Decimal("150"))

        goal = goal_service.update_goal(emergency_fund.id, {"target_amount": Decimal("5000")})

        assert goal.target_amount == Decimal("5000")
        assert goal.status == GoalStatus.COMPLETED

    def test_update_can_complete_goal(self, goal_service, emergency_fund):
        """Test that lowering the target re-evaluates completion."""
        goal = goal_service.update_goal(emergency_fund.id, {"target_amount": Decimal("800")})
        assert goal.status == GoalStatus.COMPLETED

    def test_update_rejects_status(self, goal_service, emergency_fund):
        """Test that status is derived and cannot be written."""
        with pytest.raises(ValidationError) as exc_info:
            goal_service.update_goal(emergency_fund.id, {"status": "completed"})
        assert "status" in exc_info.value.errors

    def test_update_ignores_identity_fields(self, goal_service, emergency_fund):
        """Test that id and created_at in the payload have no effect."""
        goal = goal_service.update_goal(emergency_fund.id, {"id": 77, "name": "Rainy day"})

        assert goal.id == emergency_fund.id
        assert goal.name == "Rainy day"
        assert goal.created_at == emergency_fund.created_at

    def test_update_not_found(self, goal_service):
        """Test updating a missing goal."""
        with pytest.raises(NotFoundError):
            goal_service.update_goal(4, {"name": "x"})

    def test_list_goals_by_deadline(self, goal_service):
        """Test that goals are ordered by deadline."""
        for name, deadline in [("Car", date(2025, 6, 1)), ("Trip", date(2024, 12, 31)), ("Laptop", date(2025, 1, 15))]:
            goal_service.create_goal(name=name, target_amount=Decimal("100"), deadline=deadline)

        assert [goal.name for goal in goal_service.list_goals()] == ["Trip", "Laptop", "Car"]

    def test_list_active(self, goal_service, emergency_fund):
        """Test that completed goals are not listed as active."""
        other = goal_service.create_goal(name="Car", target_amount=Decimal("100"), deadline=date(2031, 1, 1))
        goal_service.add_contribution(emergency_fund.id, Decimal("100"))

        assert [goal.id for goal in goal_service.list_active()] == [other.id]
        assert len(goal_service.list_goals()) == 2

    def test_delete_goal(self, goal_service, emergency_fund):
        """Test deleting a goal."""
        goal_service.delete_goal(emergency_fund.id)
        with pytest.raises(NotFoundError):
            goal_service.get_goal(emergency_fund.id)

    def test_progress(self, goal_service, emergency_fund):
        """Test progress of a goal."""
        progress = goal_service.progress(emergency_fund, today=date(2029, 12, 22))

        assert progress.percentage == Decimal("90")
        assert progress.days_remaining == 10
        assert progress.urgent is True


class TestConcurrentContributions:
    """Tests for contributions racing on one goal."""

    def test_parallel_contributions_are_not_lost(self, memory_db):
        """Test that every concurrent contribution is applied."""
        service = GoalService(memory_db)
        goal = service.create_goal(name="Fund", target_amount=Decimal("1000"), deadline=date(2030, 1, 1))

        def contribute(_):
            # Separate service instances share the store and its lock
            return GoalService(memory_db).add_contribution(goal.id, Decimal("10"))

        with ThreadPoolExecutor(max_workers=8) as executor:
            list(executor.map(contribute, range(40)))

        final = service.get_goal(goal.id)
        assert final.current_amount == Decimal("400")
        assert final.version == 41

    def test_contribution_retries_after_conflict(self):
        """Test that a stale write is retried against the fresh record."""
        db = RacingDatabase(races=2)
        service = GoalService(db)
        goal = service.create_goal(name="Fund", target_amount=Decimal("1000"), deadline=date(2030, 1, 1))

        updated = service.add_contribution(goal.id, Decimal("150"))

        assert updated.current_amount == Decimal("150")
        assert updated.name == "Renamed elsewhere"
        assert db.races == 0

    def test_contribution_gives_up(self):
        """Test that a goal that never settles raises a conflict."""
        db = RacingDatabase(races=MAX_WRITE_ATTEMPTS + 1)
        service = GoalService(db)
        goal = service.create_goal(name="Fund", target_amount=Decimal("1000"), deadline=date(2030, 1, 1))

        with pytest.raises(ConflictError):
            service.add_contribution(goal.id, Decimal("150"))

        assert service.get_goal(goal.id).current_amount == Decimal("0")

    def test_delete_releases_goal_lock(self, memory_db):
        """Test that deleting a goal drops its write lock."""
        service = GoalService(memory_db)
        goal = service.create_goal(name="Fund", target_amount=Decimal("1000"), deadline=date(2030, 1, 1))
        service.add_contribution(goal.id, Decimal("10"))
        assert goal.id in GoalService._locks[memory_db]

        service.delete_goal(goal.id)

        assert goal.id not in GoalService._locks.get(memory_db, {})

    def test_locks_do_not_outlive_store(self):
        """Test that a discarded store takes its goal locks with it."""
        db = InMemoryDatabase()
        service = GoalService(db)
        goal = service.create_goal(name="Fund", target_amount=Decimal("1000"), deadline=date(2030, 1, 1))
        service.add_contribution(goal.id, Decimal("10"))
        store_ref = weakref.ref(db)
        assert db in GoalService._locks

        del service, db
        gc.collect()

        assert store_ref() is None


class TestGoalCommands:
    """Tests for the goal CLI commands."""

    def test_create_and_contribute(self, cli_runner, memory_db):
        """Test creating a goal and completing it."""
        result = cli_runner.invoke(
            cli,
            ["goal", "create", "Emergency fund", "--target", "1000", "--deadline", "2030-01-01", "--current", "900"],
            obj={"db": memory_db},
        )
        assert result.exit_code == 0
        assert "Created goal 'Emergency fund' (ID: 1)" in result.output

        result = cli_runner.invoke(cli, ["goal", "contribute", "1", "150"], obj={"db": memory_db})
        assert result.exit_code == 0
        assert "$1,050.00 of $1,000.00" in result.output
        assert "Goal completed!" in result.output

    def test_list_goals(self, cli_runner, memory_db):
        """Test that completed goals only show with --all."""
        service = GoalService(memory_db)
        service.create_goal(name="Done", target_amount=Decimal("10"), deadline=date(2030, 1, 1), current_amount=Decimal("10"))

        result = cli_runner.invoke(cli, ["goal", "list"], obj={"db": memory_db})
        assert "No savings goals." in result.output

        result = cli_runner.invoke(cli, ["goal", "list", "--all"], obj={"db": memory_db})
        assert result.exit_code == 0
        assert "Done" in result.output
        assert "Completed" in result.output

    def test_contribute_zero(self, cli_runner, memory_db):
        """Test that a zero contribution is rejected."""
        GoalService(memory_db).create_goal(name="Car", target_amount=Decimal("10"), deadline=date(2030, 1, 1))

        result = cli_runner.invoke(cli, ["goal", "contribute", "1", "0"], obj={"db": memory_db})

        assert result.exit_code == 1
        assert "Contribution must be greater than zero" in result.output
