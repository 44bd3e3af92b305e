"""Bundle analysis and import commands."""

import click
from finmerge.cli.error_handling import handle_domain_error
from finmerge.domain.bundle import load_parsed_data
from finmerge.domain.errors import DomainError
from finmerge.domain.import_processor import ImportOptions, ImportProcessor


def parse_merge_decisions(ctx, values: tuple[str, ...]) -> dict[str, str]:
    """Parse repeated SRC=DST options into a source id -> local id map."""
    decisions = {}
    for value in values:
        source_id, sep, target_id = value.partition("=")
        if not sep or not source_id.strip() or not target_id.strip():
            click.echo(f"Error: Invalid merge '{value}'. Expected SOURCE_ID=LOCAL_ID", err=True)
            ctx.exit(1)
        decisions[source_id.strip()] = target_id.strip()
    return decisions


@click.command("analyze")
@click.argument("bundle", type=click.Path(exists=True))
@click.pass_context
def analyze_bundle(ctx, bundle: str):
    """Report likely duplicates in an import bundle without writing anything.

    Examples:
        finmerge analyze export.json
    """
    db = ctx.obj["db"]
    processor = ImportProcessor(db, ctx.obj["user_id"])

    try:
        data = load_parsed_data(bundle)
        category_conflicts = processor.analyze_category_conflicts(data)
        processor.load_existing_recurring()
        recurring_conflicts = processor.analyze_recurring_conflicts(data)
        groups = processor.analyze_group_data(data)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nBundle: {bundle} ({data.source.value})")
    click.echo(f"  Transactions: {len(data.transactions)}")
    click.echo(f"  Categories: {len(data.categories)}")
    click.echo(f"  Recurring: {len(data.recurring)}")

    click.echo("\nSimilar categories:")
    if not category_conflicts:
        click.echo("  None")
    for merge in category_conflicts:
        click.echo(
            f"  '{merge.imported.name}' -> '{merge.existing.name}' "
            f"(distance {merge.score}, --merge {merge.imported.id}={merge.existing.id})"
        )

    click.echo("\nDuplicate recurring transactions:")
    if not recurring_conflicts:
        click.echo("  None")
    for conflict in recurring_conflicts:
        click.echo(
            f"  '{conflict.imported.description}' {conflict.imported.amount} matches "
            f"'{conflict.existing.description}' {conflict.existing.amount} "
            f"(--skip-recurring {conflict.imported.id})"
        )

    if groups.has_groups:
        click.echo(
            f"\nWarning: {groups.group_transaction_count} transactions belong to shared "
            "groups. Group membership is not imported; amounts are reduced to your share."
        )


@click.command("import")
@click.argument("bundle", type=click.Path(exists=True))
@click.option("--merge", "merges", multiple=True, metavar="SRC=DST", help="Merge imported category SRC into local category DST")
@click.option("--accept-suggestions", is_flag=True, help="Merge every similar category reported by 'analyze'")
@click.option("--skip-recurring", "skip_recurring", multiple=True, metavar="ID", help="Do not import this recurring transaction")
@click.option("--skip-duplicate-recurring", is_flag=True, help="Do not import recurring transactions that duplicate existing ones")
@click.option("--regenerate-colors", is_flag=True, help="Generate a fresh palette for migrated categories")
@click.option("--no-rules", is_flag=True, help="Do not apply import rules")
@click.pass_context
def import_bundle(
    ctx,
    bundle: str,
    merges: tuple[str, ...],
    accept_suggestions: bool,
    skip_recurring: tuple[str, ...],
    skip_duplicate_recurring: bool,
    regenerate_colors: bool,
    no_rules: bool,
):
    """Import a parsed bundle into the local dataset.

    Examples:
        finmerge import export.json
        finmerge import export.json --merge 12=3f6c... --skip-recurring r-7
        finmerge import legacy.json --accept-suggestions --regenerate-colors
    """
    db = ctx.obj["db"]
    processor = ImportProcessor(db, ctx.obj["user_id"])
    merge_decisions = parse_merge_decisions(ctx, merges)
    skip_ids = set(skip_recurring)

    def report(current: int, total: int, message: str) -> None:
        click.echo(f"  [{current}/{total}] {message}")

    try:
        data = load_parsed_data(bundle)

        if accept_suggestions:
            for merge in processor.analyze_category_conflicts(data):
                # Explicit --merge decisions take precedence
                merge_decisions.setdefault(merge.imported.id, merge.existing.id)

        if skip_duplicate_recurring:
            processor.load_existing_recurring()
            for conflict in processor.analyze_recurring_conflicts(data):
                if conflict.imported.id:
                    skip_ids.add(conflict.imported.id)

        groups = processor.analyze_group_data(data)
        if groups.has_groups:
            click.echo(
                f"Warning: {groups.group_transaction_count} transactions belong to shared "
                "groups and will be imported as your share only",
                err=True,
            )

        click.echo(f"Importing {bundle}...")
        result = processor.process(
            data,
            on_progress=report,
            merge_decisions=merge_decisions,
            skip_recurring_ids=skip_ids,
            options=ImportOptions(
                regenerate_colors=regenerate_colors,
                apply_rules=not no_rules,
            ),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo("\nImport complete:")
    click.echo(f"  Categories: {result.categories}")
    click.echo(f"  Contexts: {result.contexts}")
    click.echo(f"  Transactions: {result.transactions}")
    click.echo(f"  Recurring: {result.recurring}")
    click.echo(f"  Budgets: {result.budgets}")
    if result.skipped_transactions:
        click.echo(f"  Skipped: {result.skipped_transactions} transactions")
    if result.orphan_count:
        click.echo(
            f"Warning: {result.orphan_count} transactions had no matching category "
            "and were filed under Uncategorized",
            err=True,
        )


def register_commands(cli):
    """Register analyze and import commands with main CLI."""
    cli.add_command(analyze_bundle)
    cli.add_command(import_bundle)
