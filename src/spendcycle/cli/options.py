"""CLI helpers for parsing shared option values."""

from datetime import datetime
from decimal import Decimal

import click

from spendcycle.utils.amount_parser import parse_amount
from spendcycle.utils.date_parser import parse_datetime


def resolve_now(ctx, value: str | None) -> datetime:
    """Resolve a --now option, defaulting to the current time."""
    if not value:
        return datetime.now()
    return resolve_datetime(ctx, value, "--now")


def resolve_datetime(ctx, value: str, label: str) -> datetime:
    """Parse a date/time option or exit with an error."""
    try:
        return parse_datetime(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def resolve_amount(ctx, value: str) -> Decimal:
    """Parse an amount option or exit with an error."""
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


def format_money(amount: Decimal, currency) -> str:
    return f"{currency.symbol}{amount:,.2f}"
