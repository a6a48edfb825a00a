"""Category management commands."""

import click
from pennywise.cli.error_handling import handle_domain_error
from pennywise.domain.category import CategoryService
from pennywise.domain.errors import DomainError

TYPE_CHOICE = click.Choice(["income", "expense"], case_sensitive=False)


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.option("--type", "category_type", type=TYPE_CHOICE, help="Only show one type")
@click.pass_context
def list_categories(ctx, category_type: str | None):
    """List categories."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    if category_type:
        categories = service.list_by_type(category_type.lower())
    else:
        categories = service.list_categories()

    if not categories:
        click.echo("No categories found. Run 'init-categories' to create default categories.")
        return

    click.echo(f"\n{'ID':<6} {'Name':<20} {'Type':<8} {'Color':<8} {'Icon':<16}")
    click.echo("-" * 64)
    for cat in categories:
        marker = " (default)" if cat.is_default else ""
        click.echo(
            f"{cat.id:<6} {cat.name:<20} {cat.type.value:<8} {cat.color:<8} {cat.icon:<16}{marker}"
        )


@category_group.command("create")
@click.argument("name")
@click.option("--type", "category_type", type=TYPE_CHOICE, default="expense", help="Category type (default: expense)")
@click.option("--color", help="Hex colour (e.g., #10b981)")
@click.option("--icon", help="Icon identifier")
@click.pass_context
def create_category(ctx, name: str, category_type: str, color: str | None, icon: str | None):
    """Create a new category."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    try:
        category = service.create_category(
            name=name, type=category_type.lower(), color=color, icon=icon
        )
        click.echo(f"Created category '{category.name}' (ID: {category.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@category_group.command("delete")
@click.argument("category_id", type=int)
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_category(ctx, category_id: int, yes: bool):
    """Delete a user category. Default categories are protected."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    try:
        category = service.get_category(category_id)
        if not yes and not click.confirm(
            f"Are you sure you want to delete category '{category.name}' (ID: {category_id})?"
        ):
            click.echo("Deletion cancelled.")
            return
        service.delete_category(category_id)
        click.echo(f"Deleted category '{category.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
