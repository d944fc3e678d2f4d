"""Main CLI entry point."""

import logging

import click

from kakeibo.database.factories import create_sqlite_database
from kakeibo.domain.config import load_config
from kakeibo.domain.errors import DomainError

# Import and register all commands at module level
from kakeibo.cli.commands import (
    account,
    add,
    alert,
    classify,
    init_master,
    reconcile,
    summary,
)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides KAKEIBO_DB_PATH environment variable)",
    envvar="KAKEIBO_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="KAKEIBO_LOG_LEVEL",
    help="Logging verbosity",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str):
    """Kakeibo - household account book.

    Classifies transactions into detailed subcategories and reconciles
    credit card bills against bank withdrawals.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            ctx.obj["config"] = load_config()
        except DomainError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
add.register_commands(cli)
alert.register_commands(cli)
classify.register_commands(cli)
init_master.register_commands(cli)
reconcile.register_commands(cli)
summary.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
