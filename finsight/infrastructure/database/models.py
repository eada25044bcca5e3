"""SQLAlchemy ORM models for users, transactions, alerts, subscriptions and audit rows"""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class UserRecord(Base):
    """Registered account"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True)
    email = Column(String(255), nullable=False, unique=True)
    full_name = Column(String(255), nullable=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False)


class TransactionRecord(Base):
    """Scored financial transaction; immutable after ingestion"""

    __tablename__ = "transactions"
    __table_args__ = (
        Index("idx_transactions_user_date", "user_id", "transaction_date"),
        Index("idx_transactions_fraudulent", "user_id", "fraudulent"),
        Index("idx_transactions_category", "user_id", "category"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    amount = Column(Numeric(19, 2), nullable=False)
    type = Column(String(20), nullable=False)
    category = Column(String(50), nullable=False)
    description = Column(String(255), nullable=True)
    location = Column(String(100), nullable=True)
    transaction_date = Column(DateTime, nullable=False)
    fraudulent = Column(Boolean, nullable=False, default=False)
    fraud_score = Column(Float, nullable=True)
    created_at = Column(DateTime, nullable=False)


class FraudAlertRecord(Base):
    """Alert raised for a transaction flagged as fraudulent"""

    __tablename__ = "fraud_alerts"
    __table_args__ = (Index("idx_fraud_alerts_user_created", "user_id", "created_at"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    transaction_id = Column(
        Integer, ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    message = Column(String(255), nullable=False)
    severity = Column(String(20), nullable=False)
    resolved = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False)

    transaction = relationship("TransactionRecord", lazy="joined")


class SubscriptionRecord(Base):
    """Recurring payment detected from expense history"""

    __tablename__ = "subscriptions"
    __table_args__ = (
        UniqueConstraint("user_id", "merchant_key", name="uq_subscriptions_user_merchant"),
        Index("idx_subscriptions_due_date", "user_id", "next_due_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    merchant = Column(String(255), nullable=False)
    merchant_key = Column(String(255), nullable=False)
    avg_amount = Column(Numeric(19, 2), nullable=False)
    last_paid_date = Column(Date, nullable=False)
    next_due_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False)
    created_at = Column(DateTime, nullable=False)


class AuditLogRecord(Base):
    """Append-only record of user actions"""

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    action = Column(String(50), nullable=False)
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(Integer, nullable=True)
    details = Column(Text, nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False)
