"""Main CLI entry point."""

import click
from finmerge.database.factories import create_sqlite_database
from finmerge.logging_config import configure_logging

# Import and register all commands at module level
from finmerge.cli.commands import category, import_cmd, rule


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FINMERGE_DB_PATH environment variable)",
    envvar="FINMERGE_DB_PATH",
)
@click.option(
    "--user-id",
    default="local",
    show_default=True,
    help="Owner of the local dataset (overrides FINMERGE_USER_ID environment variable)",
    envvar="FINMERGE_USER_ID",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, user_id: str, verbose: bool):
    """Finmerge - Import reconciliation for your finance data.

    Analyze a parsed import bundle for near-duplicate categories and
    recurring transactions, then merge it into your local dataset in one
    atomic step.
    """
    ctx.ensure_object(dict)
    configure_logging(verbose)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["user_id"] = user_id
        ctx.call_on_close(db.disconnect)


# Register all commands
import_cmd.register_commands(cli)
rule.register_commands(cli)
category.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
