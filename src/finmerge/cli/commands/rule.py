"""Import rule management commands."""

import click
from finmerge.cli.error_handling import handle_domain_error
from finmerge.domain.category import CategoryService
from finmerge.domain.constants import MATCH_TYPES, SKIP_CATEGORY_ID
from finmerge.domain.errors import DomainError
from finmerge.domain.rules import RulesEngine


def describe_target(service: CategoryService, category_id: str) -> str:
    if category_id == SKIP_CATEGORY_ID:
        return "SKIP"
    return service.format_category_path(category_id) or f"missing category {category_id}"


@click.group()
def rule_group():
    """Manage import rules."""
    pass


@rule_group.command("add")
@click.argument("match_string")
@click.argument("category_id")
@click.option("--type", "match_type", type=click.Choice(list(MATCH_TYPES), case_sensitive=False), default="contains", help="How MATCH_STRING is compared (default: contains)")
@click.pass_context
def add_rule(ctx, match_string: str, category_id: str, match_type: str):
    """Add a rule assigning CATEGORY_ID to matching imports.

    Use SKIP as CATEGORY_ID to leave matching transactions out of imports.
    Rules are tried in the order they were added; the first match wins.

    Examples:
        finmerge rule add "uber eats" 3f6c...
        finmerge rule add "^ATM " SKIP --type regex
    """
    engine = RulesEngine(ctx.obj["db"], ctx.obj["user_id"])

    try:
        rule = engine.create_rule(match_string, category_id, match_type=match_type.lower())
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created rule {rule.id}: {rule.match_type} '{rule.match_string}' -> {category_id}")


@rule_group.command("list")
@click.pass_context
def list_rules(ctx):
    """List import rules in the order they are applied."""
    db = ctx.obj["db"]
    engine = RulesEngine(db, ctx.obj["user_id"])
    service = CategoryService(db, ctx.obj["user_id"])

    rules = engine.load_rules()
    if not rules:
        click.echo("No import rules found.")
        return

    invalid = {r.id for r in engine.invalid_rules()}
    click.echo("\nImport rules:")
    for position, rule in enumerate(rules, 1):
        marker = " [invalid]" if rule.id in invalid else ""
        click.echo(
            f"  {position}. {rule.match_type} '{rule.match_string}' -> "
            f"{describe_target(service, rule.category_id)}{marker}"
        )


@rule_group.command("check")
@click.argument("description")
@click.pass_context
def check_rule(ctx, description: str):
    """Show which rule would classify DESCRIPTION."""
    db = ctx.obj["db"]
    engine = RulesEngine(db, ctx.obj["user_id"])
    service = CategoryService(db, ctx.obj["user_id"])

    engine.load_rules()
    rule = engine.match(description)
    if rule is None:
        click.echo("No rule matches.")
        return

    click.echo(
        f"Matched {rule.match_type} '{rule.match_string}' -> "
        f"{describe_target(service, rule.category_id)}"
    )


def register_commands(cli):
    """Register rule commands with main CLI."""
    cli.add_command(rule_group, name="rule")
