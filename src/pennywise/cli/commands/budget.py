"""Budget management commands."""

import click
from pennywise.cli.error_handling import handle_domain_error
from pennywise.domain.budget import BudgetService
from pennywise.domain.category import CategoryService
from pennywise.domain.entities import TransactionType
from pennywise.domain.errors import DomainError
from pennywise.domain.views import ViewAssembler
from pennywise.utils.amount_parser import format_currency, parse_amount
from pennywise.utils.date_parser import current_month_key, month_label

STATUS_LABELS = {
    "on-track": "On Track",
    "near-limit": "Near Limit",
    "over": "Over Budget",
}


@click.group()
def budget_group():
    """Manage monthly budgets."""
    pass


@budget_group.command("set")
@click.argument("category")
@click.option("--amount", required=True, help="Monthly allocation (e.g., 400)")
@click.option("--month", help="Month (YYYY-MM), defaults to the current month")
@click.pass_context
def set_budget(ctx, category: str, amount: str, month: str | None):
    """Create or change the budget of an expense CATEGORY for a month."""
    db = ctx.obj["db"]
    budget_service = BudgetService(db)
    category_service = CategoryService(db)
    month = month or current_month_key()

    try:
        parsed_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    category_obj = category_service.get_by_name(category, TransactionType.EXPENSE)
    if category_obj is None:
        click.echo(f"Error: Expense category '{category}' not found", err=True)
        ctx.exit(1)

    try:
        existing = [
            b for b in budget_service.list_by_month(month) if b.category_id == category_obj.id
        ]
        if existing:
            budget = budget_service.update_budget(existing[0].id, {"amount": parsed_amount})
            click.echo(f"Updated budget {budget.id}: {category_obj.name} {format_currency(budget.amount)} for {month}")
        else:
            budget = budget_service.create_budget(category_obj.id, month, parsed_amount)
            click.echo(f"Created budget {budget.id}: {category_obj.name} {format_currency(budget.amount)} for {month}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@budget_group.command("list")
@click.option("--month", help="Month (YYYY-MM), defaults to the current month")
@click.pass_context
def list_budgets(ctx, month: str | None):
    """Show budgets with spending for a month."""
    db = ctx.obj["db"]
    assembler = ViewAssembler.from_database(db)
    month = month or current_month_key()

    try:
        overview = assembler.budget_overview(month)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nBudgets for {month_label(month)}")
    if not overview.budgets:
        click.echo("No budgets set for this month.")
        return

    click.echo("-" * 78)
    click.echo(f"{'ID':<5} {'Category':<18} {'Budget':>12} {'Spent':>12} {'Used':>8}  {'Status':<12}")
    click.echo("-" * 78)
    for row in overview.budgets:
        click.echo(
            f"{row.id:<5} {row.category_name:<18} {format_currency(row.amount):>12} "
            f"{format_currency(row.spent):>12} {str(row.percentage) + '%':>8}  "
            f"{STATUS_LABELS[row.status.value]:<12}"
        )
    click.echo("-" * 78)
    click.echo(
        f"{'':<5} {'Total':<18} {format_currency(overview.total_budget):>12} "
        f"{format_currency(overview.total_spent):>12}"
    )


@budget_group.command("refresh")
@click.option("--month", help="Month (YYYY-MM), defaults to the current month")
@click.pass_context
def refresh_budgets(ctx, month: str | None):
    """Recompute the stored spent amount of a month's budgets."""
    db = ctx.obj["db"]
    service = BudgetService(db)
    month = month or current_month_key()

    try:
        budgets = service.refresh_spent(month)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Refreshed {len(budgets)} budget(s) for {month}")


@budget_group.command("delete")
@click.argument("budget_id", type=int)
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_budget(ctx, budget_id: int, yes: bool):
    """Delete a budget."""
    db = ctx.obj["db"]
    service = BudgetService(db)

    try:
        service.get_budget(budget_id)
        if not yes and not click.confirm(f"Are you sure you want to delete budget {budget_id}?"):
            click.echo("Deletion cancelled.")
            return
        service.delete_budget(budget_id)
        click.echo(f"Deleted budget {budget_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register budget commands with main CLI."""
    cli.add_command(budget_group, name="budget")
