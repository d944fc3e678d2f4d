"""SQLAlchemy models for kakeibo database."""

from datetime import datetime, UTC
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Account(Base):
    """Bank or card account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    institution = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    transactions = relationship("Transaction", back_populates="account", cascade="all, delete-orphan")


class Subcategory(Base):
    """Subcategory model; the tree is keyed by category type."""

    __tablename__ = "subcategories"

    id = Column(String, primary_key=True)
    category_type = Column(String, nullable=False)
    name = Column(String, nullable=False)
    parent_id = Column(String, ForeignKey("subcategories.id"), nullable=True)
    display_order = Column(Integer, default=0, nullable=False)
    is_default = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)


class Merchant(Base):
    """Merchant directory model."""

    __tablename__ = "merchants"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    aliases = Column(JSON, default=list, nullable=False)
    default_subcategory_id = Column(String, ForeignKey("subcategories.id"), nullable=False)
    confidence = Column(Float, default=0.9, nullable=False)


class Transaction(Base):
    """Transaction model. Amounts are integer yen."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    date = Column(Date, nullable=False)
    amount = Column(Integer, nullable=False)
    description = Column(String, nullable=False)
    main_category = Column(String, nullable=False)
    subcategory_id = Column(String, ForeignKey("subcategories.id"), nullable=True)
    classification_confidence = Column(Float, nullable=True)
    classification_reason = Column(String, nullable=True)
    merchant_id = Column(String, nullable=True)
    confirmed_at = Column(DateTime, nullable=True)
    imported_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    account = relationship("Account", back_populates="transactions")


class CardSummary(Base):
    """Monthly credit card summary model."""

    __tablename__ = "card_summaries"

    id = Column(Integer, primary_key=True)
    card_id = Column(String, nullable=False)
    card_name = Column(String, nullable=False)
    billing_month = Column(String, nullable=False)
    closing_date = Column(Date, nullable=False)
    payment_due_date = Column(Date, nullable=False)
    total_amount = Column(Integer, nullable=False)
    status = Column(String, nullable=False)

    __table_args__ = (UniqueConstraint("card_id", "billing_month", name="uq_card_billing_month"),)

    # Relationships
    discounts = relationship("CardDiscount", back_populates="summary", cascade="all, delete-orphan")


class CardDiscount(Base):
    """Discount applied to a card summary."""

    __tablename__ = "card_discounts"

    id = Column(Integer, primary_key=True)
    summary_id = Column(Integer, ForeignKey("card_summaries.id"), nullable=False)
    description = Column(String, nullable=False)
    amount = Column(Integer, nullable=False)

    # Relationships
    summary = relationship("CardSummary", back_populates="discounts")


class Alert(Base):
    """Alert model. Details and actions are stored as JSON documents."""

    __tablename__ = "alerts"

    id = Column(String, primary_key=True)
    type = Column(String, nullable=False)
    card_id = Column(String, nullable=True, index=True)
    billing_month = Column(String, nullable=True)
    level = Column(String, nullable=False)
    title = Column(String, nullable=False)
    message = Column(String, nullable=False)
    details = Column(JSON, nullable=False)
    actions = Column(JSON, nullable=False)
    status = Column(String, nullable=False)
    created_at = Column(DateTime, nullable=False)
    resolved_at = Column(DateTime, nullable=True)
    resolved_by = Column(String, nullable=True)
    resolution_note = Column(String, nullable=True)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
