"""SQLAlchemy models for the pennywise database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from pennywise.database.base import TRANSACTIONS, CATEGORIES, BUDGETS, GOALS

Base = declarative_base()


class Transaction(Base):
    """Transaction model."""

    __tablename__ = TRANSACTIONS

    id = Column(Integer, primary_key=True)
    amount = Column(Numeric(12, 2), nullable=False)
    type = Column(String, nullable=False)
    category = Column(String, nullable=False)
    date = Column(Date, nullable=False, index=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    version = Column(Integer, default=1, nullable=False)


class Category(Base):
    """Category model."""

    __tablename__ = CATEGORIES

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    color = Column(String, nullable=False)
    icon = Column(String, nullable=False)
    is_default = Column(Boolean, default=False, nullable=False)
    version = Column(Integer, default=1, nullable=False)

    __table_args__ = (UniqueConstraint("name", "type", name="uq_category_name_type"),)


class Budget(Base):
    """Monthly budget model."""

    __tablename__ = BUDGETS

    id = Column(Integer, primary_key=True)
    category_id = Column(Integer, nullable=False)
    month = Column(String(7), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    spent = Column(Numeric(12, 2), default=0, nullable=False)
    version = Column(Integer, default=1, nullable=False)

    __table_args__ = (UniqueConstraint("category_id", "month", name="uq_budget_category_month"),)


class Goal(Base):
    """Savings goal model."""

    __tablename__ = GOALS

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    target_amount = Column(Numeric(12, 2), nullable=False)
    current_amount = Column(Numeric(12, 2), default=0, nullable=False)
    deadline = Column(Date, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    status = Column(String, default="active", nullable=False)
    version = Column(Integer, default=1, nullable=False)


MODELS = {
    TRANSACTIONS: Transaction,
    CATEGORIES: Category,
    BUDGETS: Budget,
    GOALS: Goal,
}


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Sessions are opened per call and may run on different threads
        connect_args["check_same_thread"] = False
    engine = create_engine(database_url, echo=False, connect_args=connect_args)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
