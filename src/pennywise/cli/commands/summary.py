"""Summary, report and trend commands."""

import click
from pennywise.cli.error_handling import handle_domain_error
from pennywise.domain.errors import DomainError
from pennywise.domain.views import ViewAssembler
from pennywise.utils.amount_parser import format_currency
from pennywise.utils.date_parser import current_month_key, month_label


@click.command("summary")
@click.option("--month", help="Month (YYYY-MM), defaults to the current month")
@click.pass_context
def summary(ctx, month: str | None):
    """Show income, expenses and net for a month."""
    db = ctx.obj["db"]
    assembler = ViewAssembler.from_database(db)
    month = month or current_month_key()

    try:
        dashboard = assembler.dashboard(month)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\n{month_label(month)}")
    click.echo(f"  Income:   {format_currency(dashboard.summary.income):>14}")
    click.echo(f"  Expenses: {format_currency(dashboard.summary.expenses):>14}")
    click.echo(f"  Net:      {format_currency(dashboard.summary.net):>14}")
    click.echo(f"  Active goals: {dashboard.active_goals}")

    if dashboard.recent_transactions:
        click.echo("\nRecent transactions:")
        for row in dashboard.recent_transactions:
            click.echo(f"  {row.date}  {format_currency(row.signed_amount):>12}  {row.category}")


@click.command("report")
@click.option("--month", help="Month (YYYY-MM), defaults to the current month")
@click.option("--top", type=int, default=5, help="Number of top categories (default: 5)")
@click.pass_context
def report(ctx, month: str | None, top: int):
    """Show the monthly report with top spending categories."""
    db = ctx.obj["db"]
    assembler = ViewAssembler.from_database(db)
    month = month or current_month_key()

    try:
        view = assembler.report(month, top=top)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nReport for {month_label(month)}")
    click.echo(f"  Income:        {format_currency(view.summary.income):>14}")
    click.echo(f"  Expenses:      {format_currency(view.summary.expenses):>14}")
    click.echo(f"  Net:           {format_currency(view.summary.net):>14}")
    click.echo(f"  Savings rate:  {view.savings_rate:>13}%")
    click.echo(f"  Spending rate: {view.spending_rate:>13}%")

    click.echo("\nTop spending categories:")
    if not view.top_categories:
        click.echo("  No expenses this month.")
        return
    for rank, row in enumerate(view.top_categories, start=1):
        click.echo(f"  {rank}. {row.category:<20} {format_currency(row.amount):>12}  ({row.share}%)")


@click.command("trend")
@click.option("--month", help="Last month of the series (YYYY-MM), defaults to the current month")
@click.option("--months", type=click.IntRange(min=1), default=6, help="Number of months (default: 6)")
@click.pass_context
def trend(ctx, month: str | None, months: int):
    """Show income and expenses over recent months."""
    db = ctx.obj["db"]
    assembler = ViewAssembler.from_database(db)
    month = month or current_month_key()

    try:
        points = assembler.trend(month, months=months)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\n{'Month':<10} {'Income':>14} {'Expenses':>14}")
    click.echo("-" * 40)
    for point in points:
        click.echo(f"{point.month:<10} {format_currency(point.income):>14} {format_currency(point.expenses):>14}")


def register_commands(cli):
    """Register summary commands with main CLI."""
    cli.add_command(summary)
    cli.add_command(report)
    cli.add_command(trend)
