"""Category management commands."""

import click
from finmerge.cli.error_handling import handle_domain_error
from finmerge.domain.category import CategoryService
from finmerge.domain.constants import CATEGORY_TYPES
from finmerge.domain.errors import DomainError


def print_category_tree(categories: list[dict], indent: int = 0) -> None:
    """Recursively print category tree."""
    for cat in categories:
        prefix = "  " * indent
        click.echo(f"{prefix}{cat['name']} [{cat['type']}] (ID: {cat['id']})")
        if cat.get("children"):
            print_category_tree(cat["children"], indent + 1)


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List all categories in tree format."""
    service = CategoryService(ctx.obj["db"], ctx.obj["user_id"])

    tree = service.get_category_tree()
    if not tree:
        click.echo("No categories found. Create one with 'category create' or import a bundle.")
        return

    click.echo("\nCategories:")
    print_category_tree(tree)


@category_group.command("create")
@click.argument("name")
@click.option("--parent", "parent_id", help="Parent category ID")
@click.option("--type", "category_type", type=click.Choice(list(CATEGORY_TYPES), case_sensitive=False), help="Category type (default: parent's type, or expense)")
@click.option("--icon", help="Icon name (unknown names use the default icon)")
@click.option("--color", help="Hex colour, e.g. '#6366f1'")
@click.pass_context
def create_category(ctx, name: str, parent_id: str | None, category_type: str | None, icon: str | None, color: str | None):
    """Create a new category."""
    service = CategoryService(ctx.obj["db"], ctx.obj["user_id"])

    try:
        category_id = service.create_category(
            name=name,
            parent_id=parent_id,
            category_type=category_type.lower() if category_type else None,
            icon=icon,
            color=color,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    parent_str = f" under '{service.format_category_path(parent_id)}'" if parent_id else ""
    click.echo(f"Created category '{name}'{parent_str} (ID: {category_id})")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
