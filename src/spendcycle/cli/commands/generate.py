"""Expense generation commands."""

import click
from spendcycle.cli.error_handling import handle_domain_error
from spendcycle.cli.options import format_money, resolve_now
from spendcycle.domain.errors import DomainError
from spendcycle.domain.generator import RecurringExpenseService
from spendcycle.domain.recurrence import next_due_date


@click.command("generate")
@click.option("--now", "now_str", help="Reference time (default: now)")
@click.pass_context
def generate_expenses(ctx, now_str: str | None):
    """Generate upcoming expenses from recurring templates."""
    service = RecurringExpenseService(ctx.obj["db"], downstream=ctx.obj.get("downstream"))
    now = resolve_now(ctx, now_str)

    try:
        created = service.generate_recurring_expenses(now=now)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not created:
        click.echo("No new expenses generated.")
        return

    click.echo(f"Generated {len(created)} expense(s):")
    for expense in created:
        click.echo(f"  {expense.date:%Y-%m-%d} {expense.title} {format_money(expense.amount, expense.currency)}")


@click.command("missed")
@click.option("--now", "now_str", help="Reference time (default: now)")
@click.pass_context
def missed_payments(ctx, now_str: str | None):
    """List templates with an overdue payment that was never recorded."""
    service = RecurringExpenseService(ctx.obj["db"])
    now = resolve_now(ctx, now_str)

    missed = service.check_missed_payments(now=now)
    if not missed:
        click.echo("No missed payments.")
        return

    click.echo(f"{len(missed)} missed payment(s):")
    for template in missed:
        due = next_due_date(template)
        click.echo(f"  {template.title} was due {due:%Y-%m-%d} (ID: {template.id})")


def register_commands(cli):
    """Register generation commands with main CLI."""
    cli.add_command(generate_expenses)
    cli.add_command(missed_payments)
