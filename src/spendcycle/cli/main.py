"""Main CLI entry point."""

import logging

import click
from spendcycle.config import DB_PATH_ENV
from spendcycle.database.factories import create_sqlite_database
from spendcycle.integrations.notifications import InMemoryNotificationScheduler
from spendcycle.integrations.sync import DownstreamSync
from spendcycle.integrations.widget import WidgetExporter

# Import and register all commands at module level
from spendcycle.cli.commands import (
    import_cmd,
    template,
    generate,
    undo,
    expenses,
)


def configure_logging(verbosity: int) -> None:
    """Map -v/-vv onto INFO/DEBUG logging."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help=f"Path to database file (overrides {DB_PATH_ENV} environment variable)",
    envvar=DB_PATH_ENV,
)
@click.option("--verbose", "-v", count=True, help="Log progress (-v) or debug detail (-vv)")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: int):
    """Spendcycle - Recurring expense tracking.

    Import bank exports, detect recurring payments, and keep future
    expenses generated from confirmed templates.
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
        ctx.obj["downstream"] = DownstreamSync(
            db,
            scheduler=InMemoryNotificationScheduler(),
            widget=WidgetExporter(db),
        )
        ctx.call_on_close(db.disconnect)


# Register all commands
import_cmd.register_commands(cli)
template.register_commands(cli)
generate.register_commands(cli)
undo.register_commands(cli)
expenses.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
