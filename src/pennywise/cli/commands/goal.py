"""Savings goal commands."""

import click
from pennywise.cli.error_handling import handle_domain_error
from pennywise.domain.errors import DomainError
from pennywise.domain.goal import GoalService
from pennywise.domain.views import ViewAssembler
from pennywise.utils.amount_parser import format_currency, parse_amount
from pennywise.utils.date_parser import parse_date


def _status_label(progress) -> str:
    if progress.label == "completed":
        return "Completed"
    if progress.label == "overdue":
        return "Overdue"
    return f"{progress.days_remaining} days left"


@click.group()
def goal_group():
    """Manage savings goals."""
    pass


@goal_group.command("create")
@click.argument("name")
@click.option("--target", required=True, help="Target amount")
@click.option("--deadline", required=True, help="Deadline (YYYY-MM-DD)")
@click.option("--current", default="0", help="Amount already saved")
@click.pass_context
def create_goal(ctx, name: str, target: str, deadline: str, current: str):
    """Create a savings goal."""
    db = ctx.obj["db"]
    service = GoalService(db)

    try:
        target_amount = parse_amount(target)
        current_amount = parse_amount(current)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        deadline_date = parse_date(deadline)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        goal = service.create_goal(
            name=name,
            target_amount=target_amount,
            deadline=deadline_date,
            current_amount=current_amount,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created goal '{goal.name}' (ID: {goal.id}) target {format_currency(goal.target_amount)} by {goal.deadline}")


@goal_group.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include completed goals")
@click.pass_context
def list_goals(ctx, show_all: bool):
    """List savings goals, soonest deadline first."""
    db = ctx.obj["db"]
    assembler = ViewAssembler.from_database(db)

    goals = assembler.goal_overview(include_completed=show_all)
    if not goals:
        click.echo("No savings goals.")
        return

    click.echo(f"\n{'ID':<5} {'Name':<22} {'Saved':>12} {'Target':>12} {'Progress':>9}  {'Deadline':<12} {'Status':<14}")
    click.echo("-" * 92)
    for view in goals:
        goal, progress = view.goal, view.progress
        click.echo(
            f"{goal.id:<5} {goal.name[:22]:<22} {format_currency(goal.current_amount):>12} "
            f"{format_currency(goal.target_amount):>12} {progress.percentage:>8.1f}%  "
            f"{str(goal.deadline):<12} {_status_label(progress):<14}"
        )


@goal_group.command("contribute")
@click.argument("goal_id", type=int)
@click.argument("amount")
@click.pass_context
def contribute(ctx, goal_id: int, amount: str):
    """Add AMOUNT to a goal."""
    db = ctx.obj["db"]
    service = GoalService(db)

    try:
        parsed_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        goal = service.add_contribution(goal_id, parsed_amount)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(
        f"Added {format_currency(parsed_amount)} to '{goal.name}': "
        f"{format_currency(goal.current_amount)} of {format_currency(goal.target_amount)}"
    )
    if goal.status.value == "completed":
        click.echo("Goal completed!")


@goal_group.command("delete")
@click.argument("goal_id", type=int)
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_goal(ctx, goal_id: int, yes: bool):
    """Delete a goal."""
    db = ctx.obj["db"]
    service = GoalService(db)

    try:
        goal = service.get_goal(goal_id)
        if not yes and not click.confirm(f"Are you sure you want to delete goal '{goal.name}'?"):
            click.echo("Deletion cancelled.")
            return
        service.delete_goal(goal_id)
        click.echo(f"Deleted goal '{goal.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register goal commands with main CLI."""
    cli.add_command(goal_group, name="goal")
