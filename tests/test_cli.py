"""End-to-end tests for the command line interface."""

import click
import pytest

from spendcycle.cli.main import cli
from spendcycle.cli.options import resolve_amount, resolve_now
from spendcycle.database.factories import create_sqlite_database

NETFLIX_CSV = "\n".join(
    [
        '"Дата i час операції","Деталі операції","Сума в валюті картки (UAH)"',
        '"01.01.2024 09:00:00","NETFLIX.COM","-149,00"',
        '"31.01.2024 09:00:00","NETFLIX.COM","-149,00"',
        '"01.03.2024 09:00:00","NETFLIX.COM","-149,00"',
    ]
)


def _run(cli_runner, db_path, *args):
    return cli_runner.invoke(cli, ["--db-path", db_path, *args])


def _only_template_id(db_path):
    db = create_sqlite_database(database_path=db_path)
    try:
        return db.list_templates()[0].id
    finally:
        db.disconnect()


def _ctx() -> click.Context:
    return click.Context(click.Command("test"))


def test_resolve_amount_rejects_garbage(capsys):
    """Test that a bad amount option exits with an error."""
    with pytest.raises(click.exceptions.Exit) as excinfo:
        resolve_amount(_ctx(), "abc")

    assert excinfo.value.exit_code == 1
    assert "Invalid amount" in capsys.readouterr().err


def test_resolve_now_parses_dates():
    """Test resolving --now from a plain date."""
    assert resolve_now(_ctx(), "2024-03-20").day == 20


def test_template_add_and_list(cli_runner, db_path):
    """Test adding a template and listing it."""
    result = _run(cli_runner, db_path, "template", "add", "Gym", "30", "--start-date", "2024-01-15", "--category", "fitness")
    assert result.exit_code == 0, result.output
    assert "Created template 'Gym'" in result.output

    result = _run(cli_runner, db_path, "template", "list")
    assert result.exit_code == 0
    assert "Gym: ₴30.00 monthly [active]" in result.output


def test_template_add_rejects_zero_amount(cli_runner, db_path):
    """Test that a zero template amount is rejected."""
    result = _run(cli_runner, db_path, "template", "add", "Gym", "0")
    assert result.exit_code == 1
    assert "greater than zero" in result.output


def test_generate_and_list_expenses(cli_runner, db_path):
    """Test generating expenses twice and listing them."""
    _run(cli_runner, db_path, "template", "add", "Gym", "30", "--start-date", "2024-01-15")

    result = _run(cli_runner, db_path, "generate", "--now", "2024-03-20")
    assert result.exit_code == 0, result.output
    assert "Generated 4 expense(s)" in result.output

    result = _run(cli_runner, db_path, "generate", "--now", "2024-03-20")
    assert "No new expenses generated." in result.output

    result = _run(cli_runner, db_path, "expenses", "--generated-only")
    assert result.exit_code == 0
    assert "2024-02-15" in result.output
    assert "4 expense(s)" in result.output


def test_edit_with_apply_from_and_undo(cli_runner, db_path):
    """Test editing with --apply-from and undoing the sync."""
    _run(cli_runner, db_path, "template", "add", "Gym", "30", "--start-date", "2024-01-15")
    _run(cli_runner, db_path, "generate", "--now", "2024-03-20")
    template_id = _only_template_id(db_path)

    result = _run(cli_runner, db_path, "template", "edit", template_id, "--amount", "45", "--apply-from", "2024-03-01")
    assert result.exit_code == 0, result.output
    assert "Expenses updated: 3" in result.output

    result = _run(cli_runner, db_path, "undo", template_id)
    assert result.exit_code == 0, result.output
    assert "Restored expenses" in result.output

    result = _run(cli_runner, db_path, "undo", template_id)
    assert result.exit_code == 1
    assert "Nothing to undo" in result.output


def test_pause_resume_and_missing_template(cli_runner, db_path):
    """Test pause, resume, and showing an unknown template."""
    _run(cli_runner, db_path, "template", "add", "Gym", "30", "--start-date", "2024-01-15")
    template_id = _only_template_id(db_path)

    result = _run(cli_runner, db_path, "template", "pause", template_id, "--until", "2030-01-01")
    assert "Paused template 'Gym' until 2030-01-01" in result.output

    result = _run(cli_runner, db_path, "template", "resume", template_id)
    assert "Resumed template 'Gym'" in result.output

    result = _run(cli_runner, db_path, "template", "show", "missing")
    assert result.exit_code == 1
    assert "Template missing not found" in result.output


def test_missed_payments(cli_runner, db_path):
    """Test listing missed payments."""
    _run(cli_runner, db_path, "template", "add", "Gym", "30", "--start-date", "2024-01-15")

    result = _run(cli_runner, db_path, "missed", "--now", "2024-02-20")

    assert "1 missed payment(s)" in result.output
    assert "Gym was due 2024-02-15" in result.output


def test_import_creates_templates(cli_runner, db_path, tmp_path):
    """Test importing a bank export with --create-templates."""
    csv_path = tmp_path / "statement.csv"
    csv_path.write_text(NETFLIX_CSV, encoding="utf-8")

    result = _run(cli_runner, db_path, "import", str(csv_path), "--create-templates", "--now", "2024-03-10")

    assert result.exit_code == 0, result.output
    assert "Transactions: 3" in result.output
    assert "netflix.com: ₴149.00 monthly" in result.output
    assert "Templates created: 1" in result.output

    result = _run(cli_runner, db_path, "imports")
    assert "statement.csv: 3 transactions" in result.output


def test_import_invalid_encoding(cli_runner, db_path, tmp_path):
    """Test that a non UTF-8 export fails the import."""
    csv_path = tmp_path / "statement.csv"
    csv_path.write_bytes(b"\xff\xfe\x00bad")

    result = _run(cli_runner, db_path, "import", str(csv_path))

    assert result.exit_code == 1
    assert "Invalid file encoding" in result.output


def test_delete_template_keeps_expenses(cli_runner, db_path):
    """Test deleting a template with --yes."""
    _run(cli_runner, db_path, "template", "add", "Gym", "30", "--start-date", "2024-01-15")
    _run(cli_runner, db_path, "generate", "--now", "2024-03-20")
    template_id = _only_template_id(db_path)

    result = _run(cli_runner, db_path, "template", "delete", template_id, "--yes")

    assert result.exit_code == 0, result.output
    assert "4 expense(s) kept" in result.output


def test_template_edit_clears_notes(cli_runner, db_path):
    """Test removing template notes with --clear-notes."""
    _run(cli_runner, db_path, "template", "add", "Gym", "30", "--notes", "Family plan")
    template_id = _only_template_id(db_path)

    result = _run(cli_runner, db_path, "template", "edit", template_id, "--clear-notes")
    assert result.exit_code == 0, result.output

    result = _run(cli_runner, db_path, "template", "show", template_id)
    assert "Notes:" not in result.output
    assert "Amount: ₴30.00" in result.output
