"""SQLAlchemy models for the spendcycle record store."""

from datetime import datetime
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    Integer,
    Numeric,
    String,
    Text,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


class RecurringTemplate(Base):
    """Recurring expense template model."""

    __tablename__ = "recurring_templates"

    id = Column(String(36), primary_key=True)
    title = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    amount_tolerance = Column(Float, default=0.05, nullable=False)
    categories = Column(JSON, nullable=False, default=list)
    payment_method = Column(String, nullable=False)
    currency = Column(String, nullable=False)
    merchant = Column(String, nullable=False)
    notes = Column(String, nullable=True)
    frequency = Column(String, nullable=False)
    start_date = Column(DateTime, nullable=False)
    last_generated_date = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    is_paused = Column(Boolean, default=False, nullable=False)
    paused_until = Column(DateTime, nullable=True)
    occurrence_count = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, nullable=False)


class Expense(Base):
    """Expense model.

    ``template_id`` is a plain indexed column with no foreign key so that
    deleting a template never touches the expenses generated from it.
    """

    __tablename__ = "expenses"

    id = Column(String(36), primary_key=True)
    title = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(DateTime, nullable=False, index=True)
    categories = Column(JSON, nullable=False, default=list)
    payment_method = Column(String, nullable=False)
    currency = Column(String, nullable=False)
    merchant = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    template_id = Column(String(36), nullable=True, index=True)
    is_generated = Column(Boolean, default=False, nullable=False)
    is_manually_edited = Column(Boolean, default=False, nullable=False)
    is_income = Column(Boolean, default=False, nullable=False)
    template_snapshot_hash = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.now, nullable=False)


class ImportSession(Base):
    """Import history model."""

    __tablename__ = "import_sessions"

    id = Column(String(36), primary_key=True)
    import_date = Column(DateTime, nullable=False, index=True)
    file_name = Column(String, nullable=False)
    transaction_count = Column(Integer, default=0, nullable=False)
    templates_suggested = Column(Integer, default=0, nullable=False)
    templates_created = Column(Integer, default=0, nullable=False)
    duplicate_count = Column(Integer, default=0, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)


class KeyValue(Base):
    """Short-lived key-value entries (undo snapshots, widget payloads)."""

    __tablename__ = "key_values"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
