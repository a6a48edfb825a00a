"""Initialize default categories."""

import click
from pennywise.domain.category import CategoryService, DEFAULT_CATEGORIES


@click.command("init-categories")
@click.pass_context
def init_categories(ctx):
    """Create the default income and expense categories."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    created = service.seed_defaults()
    if created == 0:
        click.echo("Default categories already exist.")
        return

    skipped = len(DEFAULT_CATEGORIES) - created
    click.echo(f"Successfully created {created} categories.")
    if skipped:
        click.echo(f"Skipped {skipped} that already existed.")


def register_commands(cli):
    """Register init-categories command with main CLI."""
    cli.add_command(init_categories)
