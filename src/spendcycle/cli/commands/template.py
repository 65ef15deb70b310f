"""Recurring template management commands."""

from datetime import datetime

import click
from spendcycle.cli.error_handling import handle_domain_error
from spendcycle.cli.options import format_money, resolve_amount, resolve_datetime
from spendcycle.domain.entities import Currency, ExpenseCategory, Frequency, PaymentMethod
from spendcycle.domain.errors import DomainError
from spendcycle.domain.recurrence import is_currently_paused, next_due_date
from spendcycle.domain.template import TemplateService
from spendcycle.domain.template_sync import TemplateSyncService

FREQUENCY_CHOICE = click.Choice([f.value for f in Frequency], case_sensitive=False)
CATEGORY_CHOICE = click.Choice([c.value for c in ExpenseCategory], case_sensitive=False)
PAYMENT_CHOICE = click.Choice([p.value for p in PaymentMethod], case_sensitive=False)
CURRENCY_CHOICE = click.Choice([c.value for c in Currency], case_sensitive=False)


def _service(ctx) -> TemplateService:
    db = ctx.obj["db"]
    return TemplateService(db, sync_service=TemplateSyncService(db, downstream=ctx.obj.get("downstream")))


def _status(template, now) -> str:
    if not template.is_active:
        return "inactive"
    if is_currently_paused(template, now):
        if template.paused_until:
            return f"paused until {template.paused_until:%Y-%m-%d}"
        return "paused"
    return "active"


@click.group()
def template_group():
    """Manage recurring templates."""
    pass


@template_group.command("add")
@click.argument("title")
@click.argument("amount")
@click.option("--merchant", help="Merchant text used for matching (default: title)")
@click.option("--frequency", type=FREQUENCY_CHOICE, default=Frequency.MONTHLY.value, show_default=True)
@click.option("--start-date", help="First occurrence (default: now)")
@click.option("--category", "categories", type=CATEGORY_CHOICE, multiple=True, help="Category (repeatable)")
@click.option("--payment-method", type=PAYMENT_CHOICE, default=PaymentMethod.CARD.value, show_default=True)
@click.option("--currency", type=CURRENCY_CHOICE, default=Currency.UAH.value, show_default=True)
@click.option("--tolerance", type=float, default=0.05, show_default=True, help="Allowed amount deviation")
@click.option("--notes", help="Notes")
@click.pass_context
def add_template(
    ctx,
    title: str,
    amount: str,
    merchant: str | None,
    frequency: str,
    start_date: str | None,
    categories: tuple[str, ...],
    payment_method: str,
    currency: str,
    tolerance: float,
    notes: str | None,
):
    """Create a recurring template."""
    service = _service(ctx)
    amount_value = resolve_amount(ctx, amount)
    start = resolve_datetime(ctx, start_date, "start date") if start_date else None

    try:
        template = service.create_template(
            title=title,
            amount=amount_value,
            merchant=merchant,
            frequency=Frequency(frequency.lower()),
            start_date=start,
            categories=[ExpenseCategory(c.lower()) for c in categories] or None,
            payment_method=PaymentMethod(payment_method.lower()),
            currency=Currency(currency.lower()),
            notes=notes,
            amount_tolerance=tolerance,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created template '{template.title}' (ID: {template.id})")


@template_group.command("list")
@click.option("--active-only", is_flag=True, help="Hide inactive templates")
@click.pass_context
def list_templates(ctx, active_only: bool):
    """List recurring templates."""
    service = _service(ctx)
    templates = service.list_templates(active_only=active_only)
    if not templates:
        click.echo("No templates found.")
        return

    now = datetime.now()
    click.echo("\nTemplates:")
    for template in templates:
        click.echo(
            f"  {template.title}: {format_money(template.amount, template.currency)} "
            f"{template.frequency.value} [{_status(template, now)}] (ID: {template.id})"
        )


@template_group.command("show")
@click.argument("template_id")
@click.pass_context
def show_template(ctx, template_id: str):
    """Show template details."""
    service = _service(ctx)
    try:
        template = service.require_template(template_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    due = next_due_date(template)
    click.echo(f"\n{template.title}")
    click.echo(f"  ID: {template.id}")
    click.echo(f"  Amount: {format_money(template.amount, template.currency)} (±{template.amount_tolerance:.0%})")
    click.echo(f"  Merchant: {template.merchant}")
    click.echo(f"  Frequency: {template.frequency.value}")
    click.echo(f"  Start date: {template.start_date:%Y-%m-%d}")
    click.echo(f"  Categories: {', '.join(c.value for c in template.categories)}")
    click.echo(f"  Payment method: {template.payment_method.value}")
    click.echo(f"  Status: {_status(template, datetime.now())}")
    if template.last_generated_date:
        click.echo(f"  Last generated: {template.last_generated_date:%Y-%m-%d}")
    if due:
        click.echo(f"  Next due: {due:%Y-%m-%d}")
    if template.notes:
        click.echo(f"  Notes: {template.notes}")


@template_group.command("edit")
@click.argument("template_id")
@click.option("--title", help="New title")
@click.option("--amount", help="New amount")
@click.option("--merchant", help="New merchant")
@click.option("--frequency", type=FREQUENCY_CHOICE, help="New frequency")
@click.option("--category", "categories", type=CATEGORY_CHOICE, multiple=True, help="Replace categories (repeatable)")
@click.option("--tolerance", type=float, help="New amount tolerance")
@click.option("--notes", help="New notes")
@click.option("--clear-notes", is_flag=True, help="Remove the notes")
@click.option("--apply-from", help="Also update generated expenses dated on or after this date")
@click.pass_context
def edit_template(
    ctx,
    template_id: str,
    title: str | None,
    amount: str | None,
    merchant: str | None,
    frequency: str | None,
    categories: tuple[str, ...],
    tolerance: float | None,
    notes: str | None,
    clear_notes: bool,
    apply_from: str | None,
):
    """Edit a template and optionally its generated expenses."""
    service = _service(ctx)
    changes = {
        "title": title,
        "amount": resolve_amount(ctx, amount) if amount else None,
        "merchant": merchant,
        "frequency": Frequency(frequency.lower()) if frequency else None,
        "categories": [ExpenseCategory(c.lower()) for c in categories] or None,
        "amount_tolerance": tolerance,
        "notes": notes,
    }
    # Options left out are not edits
    changes = {name: value for name, value in changes.items() if value is not None}
    if clear_notes:
        changes["notes"] = None
    apply_from_date = resolve_datetime(ctx, apply_from, "--apply-from") if apply_from else None

    try:
        template, result = service.update_template(template_id, apply_from=apply_from_date, **changes)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Updated template '{template.title}'")
    if result is not None:
        click.echo(f"  Expenses updated: {result.updated_count}")
        if result.skipped_manual_count:
            click.echo(f"  Manually edited, left unchanged: {result.skipped_manual_count}")


@template_group.command("pause")
@click.argument("template_id")
@click.option("--until", help="Resume automatically after this date")
@click.pass_context
def pause_template(ctx, template_id: str, until: str | None):
    """Pause expense generation for a template."""
    service = _service(ctx)
    until_date = resolve_datetime(ctx, until, "--until") if until else None
    try:
        template = service.pause_template(template_id, until=until_date)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    suffix = f" until {until_date:%Y-%m-%d}" if until_date else ""
    click.echo(f"Paused template '{template.title}'{suffix}")


@template_group.command("resume")
@click.argument("template_id")
@click.pass_context
def resume_template(ctx, template_id: str):
    """Resume a paused template."""
    service = _service(ctx)
    try:
        template = service.resume_template(template_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Resumed template '{template.title}'")


@template_group.command("deactivate")
@click.argument("template_id")
@click.pass_context
def deactivate_template(ctx, template_id: str):
    """Stop generating expenses for a template without deleting it."""
    service = _service(ctx)
    try:
        template = service.set_active(template_id, False)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deactivated template '{template.title}'")


@template_group.command("delete")
@click.argument("template_id")
@click.confirmation_option(prompt="Delete this template? Generated expenses are kept.")
@click.pass_context
def delete_template(ctx, template_id: str):
    """Delete a template, keeping its expenses."""
    service = _service(ctx)
    try:
        kept = service.delete_template(template_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted template {template_id} ({kept} expense(s) kept)")


def register_commands(cli):
    """Register template commands with main CLI."""
    cli.add_command(template_group, name="template")
