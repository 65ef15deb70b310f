"""Shared pytest fixtures for spendcycle tests."""

import tempfile
import os
from datetime import datetime
from decimal import Decimal

import pytest
from click.testing import CliRunner

from spendcycle.database.factories import create_sqlite_database
from spendcycle.domain.csv_import import CSVImportService
from spendcycle.domain.entities import Frequency
from spendcycle.domain.generator import RecurringExpenseService
from spendcycle.domain.template import TemplateService
from spendcycle.domain.template_sync import TemplateSyncService
from spendcycle.integrations.notifications import InMemoryNotificationScheduler
from spendcycle.integrations.sync import DownstreamSync
from spendcycle.integrations.widget import WidgetExporter


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def scheduler():
    """In-memory notification scheduler."""
    return InMemoryNotificationScheduler()


@pytest.fixture
def downstream(temp_db, scheduler):
    """Widget and reminder refresh over the temporary database."""
    return DownstreamSync(temp_db, scheduler=scheduler, widget=WidgetExporter(temp_db))


@pytest.fixture
def sync_service(temp_db, downstream):
    """Create a TemplateSyncService with a temporary database."""
    return TemplateSyncService(temp_db, downstream=downstream)


@pytest.fixture
def template_service(temp_db, sync_service):
    """Create a TemplateService with a temporary database."""
    return TemplateService(temp_db, sync_service=sync_service)


@pytest.fixture
def expense_service(temp_db, downstream):
    """Create a RecurringExpenseService with a temporary database."""
    return RecurringExpenseService(temp_db, downstream=downstream)


@pytest.fixture
def import_service(temp_db):
    """Create a CSVImportService with a temporary database."""
    return CSVImportService(temp_db)


@pytest.fixture
def gym_template(template_service):
    """Monthly gym membership starting mid-January 2024."""
    return template_service.create_template(
        title="Gym",
        amount=Decimal("30"),
        merchant="gym",
        frequency=Frequency.MONTHLY,
        start_date=datetime(2024, 1, 15),
    )


@pytest.fixture
def cli_runner():
    """Click test runner."""
    return CliRunner()


@pytest.fixture
def db_path(tmp_path):
    """Database path for CLI invocations."""
    return str(tmp_path / "cli.db")
