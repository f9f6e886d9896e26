"""SQLAlchemy models for myfinance database."""

import uuid
from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Boolean,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


class User(Base):
    """Application user model."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now, nullable=False)


class Account(Base):
    """Bank account model."""

    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    currency = Column(String(3), nullable=False)
    name = Column(String, nullable=False)
    color = Column(String, default="", nullable=False)
    type = Column(String, default="expense", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_now, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    transactions = relationship("Transaction", back_populates="account")


class Category(Base):
    """Category model with a two-level hierarchy.

    Rows with a null user_id are system categories shared by all users.
    """

    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    name = Column(String, nullable=False)
    description = Column(String, default="", nullable=False)
    type = Column(String, nullable=False)
    color = Column(String, default="", nullable=False)
    icon = Column(String, default="", nullable=False)
    parent_id = Column(String(36), ForeignKey("categories.id"), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    visible = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_now, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    # One system category per (name, type)
    __table_args__ = (
        Index(
            "uq_system_category_name_type",
            "name",
            "type",
            unique=True,
            sqlite_where=user_id.is_(None),
            postgresql_where=user_id.is_(None),
        ),
    )

    # Relationships
    parent = relationship("Category", remote_side=[id], backref="children")
    transactions = relationship("Transaction", back_populates="category")


class Transaction(Base):
    """Transaction model. Amounts are integer minor units."""

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    description = Column(String, default="", nullable=False)
    amount = Column(Integer, nullable=False)
    type = Column(String, nullable=False)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=False)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=False)
    due_date = Column(Date, nullable=False)
    competence_date = Column(Date, nullable=False)
    is_paid = Column(Boolean, default=False, nullable=False)
    observation = Column(String, default="", nullable=False)
    is_recurring = Column(Boolean, default=False, nullable=False)
    recurring_type = Column(String, nullable=True)
    installments = Column(Integer, default=1, nullable=False)
    current_installment = Column(Integer, default=1, nullable=False)
    parent_transaction_id = Column(String(36), ForeignKey("transactions.id"), nullable=True)
    transfer_id = Column(String(36), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_now, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    account = relationship("Account", back_populates="transactions")
    category = relationship("Category", back_populates="transactions")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
