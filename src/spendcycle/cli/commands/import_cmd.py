"""CSV import commands."""

from pathlib import Path

import click
from spendcycle.cli.error_handling import handle_domain_error
from spendcycle.cli.options import format_money, resolve_now
from spendcycle.domain.csv_import import CSVImportService
from spendcycle.domain.entities import Currency
from spendcycle.domain.errors import DomainError


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--create-templates", is_flag=True, help="Create templates from the suggestions")
@click.option(
    "--min-confidence",
    type=click.FloatRange(0.0, 1.0),
    default=0.0,
    show_default=True,
    help="Only create templates for suggestions at least this confident",
)
@click.option("--now", "now_str", help="Reference time for the detection window (default: now)")
@click.pass_context
def import_csv(ctx, csv_file: str, create_templates: bool, min_confidence: float, now_str: str | None):
    """Import a bank export and detect recurring payments."""
    db = ctx.obj["db"]
    service = CSVImportService(db)
    now = resolve_now(ctx, now_str)

    try:
        content = Path(csv_file).read_bytes()
        result = service.import_content(content, file_name=Path(csv_file).name, now=now)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo("\nImport complete:")
    click.echo(f"  Transactions: {result.session.transaction_count}")
    click.echo(f"  Duplicates: {result.session.duplicate_count}")
    click.echo(f"  Suggestions: {len(result.suggestions)}")

    for suggestion in result.suggestions:
        click.echo(
            f"    {suggestion.merchant}: {format_money(suggestion.suggested_amount, Currency.UAH)} "
            f"{suggestion.frequency.value}, {suggestion.occurrence_count} occurrence(s), "
            f"confidence {suggestion.confidence:.0%}"
        )

    if create_templates:
        accepted = [s for s in result.suggestions if s.confidence >= min_confidence]
        try:
            templates = service.create_templates(accepted, session_id=result.session.id)
        except DomainError as e:
            handle_domain_error(ctx, e)
            return
        click.echo(f"  Templates created: {len(templates)}")
        for template in templates:
            click.echo(f"    {template.title} (ID: {template.id})")


@click.command("imports")
@click.pass_context
def list_imports(ctx):
    """Show recent import history."""
    service = CSVImportService(ctx.obj["db"])
    sessions = service.get_import_history()
    if not sessions:
        click.echo("No imports found.")
        return

    click.echo("\nImports:")
    for session in sessions:
        click.echo(
            f"  {session.import_date:%Y-%m-%d %H:%M} {session.file_name}: "
            f"{session.transaction_count} transactions, {session.duplicate_count} duplicates, "
            f"{session.templates_suggested} suggested, {session.templates_created} created"
        )


def register_commands(cli):
    """Register import commands with main CLI."""
    cli.add_command(import_csv)
    cli.add_command(list_imports)
