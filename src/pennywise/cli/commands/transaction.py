"""Transaction management commands."""

import click
from pennywise.cli.error_handling import handle_domain_error
from pennywise.domain.errors import DomainError
from pennywise.domain.transaction import TransactionService
from pennywise.domain.views import ViewAssembler
from pennywise.utils.amount_parser import format_currency, parse_amount
from pennywise.utils.date_parser import parse_date

TYPE_CHOICE = click.Choice(["income", "expense"], case_sensitive=False)


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("add")
@click.option("--type", "txn_type", type=TYPE_CHOICE, default="expense", help="income or expense (default: expense)")
@click.option("--amount", required=True, help="Transaction amount (e.g., 123.45)")
@click.option("--category", required=True, help="Category name (e.g., 'Food')")
@click.option(
    "--date",
    "txn_date",
    default="today",
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--notes", help="Notes")
@click.pass_context
def add_transaction(ctx, txn_type: str, amount: str, category: str, txn_date: str, notes: str | None):
    """Record a transaction.

    Examples:
        pennywise transaction add --amount 40 --category Food --date 2024-03-05
        pennywise transaction add --type income --amount 2500 --category Salary
    """
    db = ctx.obj["db"]
    service = TransactionService(db)

    try:
        parsed_date = parse_date(txn_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        parsed_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        txn = service.create_transaction(
            amount=parsed_amount,
            type=txn_type.lower(),
            category=category,
            date=parsed_date,
            notes=notes,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created transaction {txn.id}")
    click.echo(f"  Date: {txn.date}")
    click.echo(f"  Amount: {format_currency(txn.signed_amount)}")
    click.echo(f"  Category: {txn.category}")
    if txn.notes:
        click.echo(f"  Notes: {txn.notes}")


@transaction_group.command("list")
@click.option("--month", help="Month (YYYY-MM); all months when omitted")
@click.option("--limit", type=int, help="Show at most this many transactions")
@click.pass_context
def list_transactions(ctx, month: str | None, limit: int | None):
    """List transactions, most recent first."""
    db = ctx.obj["db"]
    assembler = ViewAssembler.from_database(db)

    try:
        if month:
            rows = assembler.recent_transactions(month, limit=limit)
        else:
            rows = assembler.all_transactions()
            if limit is not None:
                rows = rows[:limit]
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not rows:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(rows)} transaction(s):")
    click.echo("-" * 80)
    click.echo(f"{'ID':<6} {'Date':<12} {'Amount':>12}  {'Category':<20} {'Notes':<26}")
    click.echo("-" * 80)
    for row in rows:
        notes = (row.notes or "")[:26]
        click.echo(
            f"{row.id:<6} {str(row.date):<12} {format_currency(row.signed_amount):>12}  "
            f"{row.category:<20} {notes:<26}"
        )


@transaction_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--type", "txn_type", type=TYPE_CHOICE, help="income or expense")
@click.option("--amount", help="Transaction amount")
@click.option("--category", help="Category name")
@click.option("--date", "txn_date", help="Transaction date")
@click.option("--notes", help="Notes (empty string to clear)")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: int,
    txn_type: str | None,
    amount: str | None,
    category: str | None,
    txn_date: str | None,
    notes: str | None,
) -> None:
    """Update a transaction.

    Updates only the fields that are provided.
    """
    db = ctx.obj["db"]
    service = TransactionService(db)

    fields = {}
    if txn_type is not None:
        fields["type"] = txn_type.lower()
    if amount is not None:
        try:
            fields["amount"] = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)
    if category is not None:
        fields["category"] = category
    if txn_date is not None:
        try:
            fields["date"] = parse_date(txn_date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)
    if notes is not None:
        fields["notes"] = notes

    if not fields:
        click.echo("Nothing to update.")
        return

    try:
        service.update_transaction(transaction_id, fields)
        click.echo(f"Updated transaction {transaction_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool):
    """Delete a transaction."""
    db = ctx.obj["db"]
    service = TransactionService(db)

    try:
        service.get_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not yes and not click.confirm(f"Are you sure you want to delete transaction {transaction_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_transaction(transaction_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
