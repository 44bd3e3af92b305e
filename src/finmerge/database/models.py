"""SQLAlchemy models for the finmerge local store."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _now() -> datetime:
    return datetime.now(UTC)


class Category(Base):
    """Category model with hierarchical structure."""

    __tablename__ = "categories"

    id = Column(String(36), primary_key=True)
    # NULL only for the local-only sentinel
    user_id = Column(String, nullable=True, index=True)
    name = Column(String, nullable=False)
    icon = Column(String, nullable=False)
    color = Column(String, nullable=False)
    type = Column(String, nullable=False)
    parent_id = Column(String(36), ForeignKey("categories.id"), nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    deleted_at = Column(DateTime, nullable=True)
    pending_sync = Column(Boolean, default=True, nullable=False)
    local_only = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    # Relationships
    parent = relationship("Category", remote_side=[id], backref="children")


class Context(Base):
    """Context model."""

    __tablename__ = "contexts"

    id = Column(String(36), primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    deleted_at = Column(DateTime, nullable=True)
    pending_sync = Column(Boolean, default=True, nullable=False)


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=False)
    context_id = Column(String(36), ForeignKey("contexts.id"), nullable=True)
    type = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(Date, nullable=False)
    year_month = Column(String(7), nullable=False)
    description = Column(String, nullable=False)
    group_id = Column(String(36), nullable=True)
    paid_by_member_id = Column(String(36), nullable=True)
    deleted_at = Column(DateTime, nullable=True)
    pending_sync = Column(Boolean, default=True, nullable=False)

    # Relationships
    category = relationship("Category")


class RecurringTransaction(Base):
    """Recurring transaction model."""

    __tablename__ = "recurring_transactions"

    id = Column(String(36), primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=False)
    context_id = Column(String(36), ForeignKey("contexts.id"), nullable=True)
    type = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(String, nullable=False)
    frequency = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    deleted_at = Column(DateTime, nullable=True)
    pending_sync = Column(Boolean, default=True, nullable=False)


class CategoryBudget(Base):
    """Category budget model."""

    __tablename__ = "category_budgets"

    id = Column(String(36), primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    period = Column(String, nullable=False)
    deleted_at = Column(DateTime, nullable=True)
    pending_sync = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)


class ImportRule(Base):
    """Import rule model."""

    __tablename__ = "import_rules"

    id = Column(String(36), primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    # Rules are consulted in this order
    position = Column(Integer, nullable=False, default=0)
    match_string = Column(String, nullable=False)
    match_type = Column(String, nullable=False)
    # Either a category id or the SKIP pseudo-category, so no foreign key
    category_id = Column(String(36), nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    deleted_at = Column(DateTime, nullable=True)
    pending_sync = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
