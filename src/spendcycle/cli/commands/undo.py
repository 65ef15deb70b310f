"""Undo command for template syncs."""

import click
from spendcycle.domain.template_sync import TemplateSyncService


@click.command("undo")
@click.argument("template_id")
@click.pass_context
def undo_template_update(ctx, template_id: str):
    """Undo the last sync of a template's generated expenses."""
    errors = []
    service = TemplateSyncService(ctx.obj["db"], downstream=ctx.obj.get("downstream"), on_error=errors.append)

    if service.undo_last_template_update(template_id):
        click.echo(f"Restored expenses of template {template_id}")
        return

    if errors:
        click.echo(f"Error: Undo failed: {errors[0]}", err=True)
    else:
        click.echo(f"Error: Nothing to undo for template {template_id}", err=True)
    ctx.exit(1)


def register_commands(cli):
    """Register undo command with main CLI."""
    cli.add_command(undo_template_update)
