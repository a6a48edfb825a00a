"""Main CLI entry point."""

import logging

import click

from pennywise.database.factories import BACKENDS, create_database

# Import and register all commands at module level
from pennywise.cli.commands import (
    budget,
    category,
    goal,
    init_categories,
    summary,
    transaction,
)


@click.group()
@click.option(
    "--backend",
    type=click.Choice(BACKENDS, case_sensitive=False),
    help="Record store to use (overrides PENNYWISE_BACKEND environment variable)",
    envvar="PENNYWISE_BACKEND",
)
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to SQLite database file (overrides PENNYWISE_DB_PATH environment variable)",
    envvar="PENNYWISE_DB_PATH",
)
@click.option(
    "--api-url",
    help="Record store URL for the remote backend (overrides PENNYWISE_API_URL)",
    envvar="PENNYWISE_API_URL",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, backend: str | None, db_path: str | None, api_url: str | None, verbose: bool):
    """Pennywise - Personal finance tracking.

    Record income and expenses, set monthly budgets per category, track
    savings goals and review monthly reports.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize the record store only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None and "db" not in ctx.obj:
        try:
            db = create_database(backend=backend, database_path=db_path, api_url=api_url)
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
init_categories.register_commands(cli)
category.register_commands(cli)
transaction.register_commands(cli)
budget.register_commands(cli)
goal.register_commands(cli)
summary.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
