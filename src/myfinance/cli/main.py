"""Main CLI entry point."""

import logging

import click
from myfinance.database.factories import create_database

# Import and register all commands at module level
from myfinance.cli.commands import (
    user,
    account,
    category,
    transaction,
    import_cmd,
    exchange,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to SQLite database file (overrides MYFINANCE_DB_PATH environment variable)",
    envvar="MYFINANCE_DB_PATH",
)
@click.option(
    "--database-url",
    help="SQLAlchemy database URL (overrides MYFINANCE_DATABASE_URL environment variable)",
    envvar="MYFINANCE_DATABASE_URL",
)
@click.option(
    "--user",
    "user_id",
    help="ID of the user to act as (overrides MYFINANCE_USER_ID environment variable)",
    envvar="MYFINANCE_USER_ID",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, database_url: str | None, user_id: str | None, verbose: bool):
    """myfinance - Personal finance bookkeeping.

    Manage accounts, categories and transactions, including transfers
    between accounts held in different currencies.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_database(database_url=database_url, database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["user_id"] = user_id
        ctx.call_on_close(db.disconnect)


# Register all commands
user.register_commands(cli)
account.register_commands(cli)
category.register_commands(cli)
transaction.register_commands(cli)
import_cmd.register_commands(cli)
exchange.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
