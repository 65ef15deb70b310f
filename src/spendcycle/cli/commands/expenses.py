"""Expense listing and editing commands."""

import click
from spendcycle.cli.error_handling import handle_domain_error
from spendcycle.cli.options import format_money, resolve_amount, resolve_datetime
from spendcycle.domain.entities import ExpenseCategory
from spendcycle.domain.errors import DomainError
from spendcycle.domain.generator import RecurringExpenseService


@click.command("expenses")
@click.option("--template", "template_id", help="Only expenses generated from this template")
@click.option("--start-date", help="Start date filter")
@click.option("--end-date", help="End date filter")
@click.option("--generated-only", is_flag=True, help="Only generated expenses")
@click.pass_context
def list_expenses(ctx, template_id: str | None, start_date: str | None, end_date: str | None, generated_only: bool):
    """List expenses."""
    db = ctx.obj["db"]
    start = resolve_datetime(ctx, start_date, "start date") if start_date else None
    end = resolve_datetime(ctx, end_date, "end date") if end_date else None

    expenses = db.list_expenses(template_id=template_id, start_date=start, end_date=end, generated_only=generated_only)
    if not expenses:
        click.echo("No expenses found.")
        return

    click.echo(f"\n{'Date':<12} {'Title':<30} {'Amount':>12}  Flags")
    click.echo("-" * 64)
    for expense in expenses:
        flags = []
        if expense.is_generated:
            flags.append("generated")
        if expense.is_manually_edited:
            flags.append("edited")
        if expense.is_income:
            flags.append("income")
        click.echo(
            f"{expense.date:%Y-%m-%d}   {expense.title[:30]:<30} "
            f"{format_money(expense.amount, expense.currency):>12}  {','.join(flags)}"
        )
    click.echo(f"\n{len(expenses)} expense(s)")


@click.command("edit-expense")
@click.argument("expense_id")
@click.option("--title", help="New title")
@click.option("--amount", help="New amount")
@click.option("--date", "date_str", help="New date")
@click.option(
    "--category",
    "categories",
    type=click.Choice([c.value for c in ExpenseCategory], case_sensitive=False),
    multiple=True,
    help="Replace categories (repeatable)",
)
@click.option("--notes", help="New notes")
@click.pass_context
def edit_expense(
    ctx,
    expense_id: str,
    title: str | None,
    amount: str | None,
    date_str: str | None,
    categories: tuple[str, ...],
    notes: str | None,
):
    """Edit an expense. Edited generated expenses stop following their template."""
    service = RecurringExpenseService(ctx.obj["db"], downstream=ctx.obj.get("downstream"))
    try:
        expense = service.edit_expense(
            expense_id,
            title=title,
            amount=resolve_amount(ctx, amount) if amount else None,
            date=resolve_datetime(ctx, date_str, "date") if date_str else None,
            categories=[ExpenseCategory(c.lower()) for c in categories] or None,
            notes=notes,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Updated expense '{expense.title}' (ID: {expense.id})")


def register_commands(cli):
    """Register expense commands with main CLI."""
    cli.add_command(list_expenses)
    cli.add_command(edit_expense)
