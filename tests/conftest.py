"""Pytest fixtures for testing"""

import os

# Cheap bcrypt cost for tests; must be set before settings are loaded
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Generator, Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from finsight.api.main import create_app
from finsight.infrastructure.database.models import Base, TransactionRecord, UserRecord
from finsight.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


def _make_user(db: Session, username: str) -> UserRecord:
    user = UserRecord(
        username=username,
        email=f"{username}@example.com",
        full_name=username.title(),
        password_hash="unused-in-these-tests",
        created_at=datetime.now(),
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def user(db: Session) -> UserRecord:
    return _make_user(db, "alice")


@pytest.fixture
def other_user(db: Session) -> UserRecord:
    return _make_user(db, "bob")


@pytest.fixture
def add_transaction(db: Session, user: UserRecord) -> Callable[..., TransactionRecord]:
    """Insert a stored transaction directly, bypassing scoring"""

    def _add(
        amount: str = "10.00",
        type: str = "EXPENSE",
        category: str = "groceries",
        description: Optional[str] = "Corner Store",
        location: Optional[str] = None,
        when: Optional[datetime] = None,
        fraudulent: bool = False,
        fraud_score: Optional[float] = 0.0,
        user_id: Optional[int] = None,
    ) -> TransactionRecord:
        when = when or datetime.now()
        record = TransactionRecord(
            user_id=user_id or user.id,
            amount=Decimal(amount),
            type=type,
            category=category,
            description=description,
            location=location,
            transaction_date=when,
            fraudulent=fraudulent,
            fraud_score=fraud_score,
            created_at=when,
        )
        db.add(record)
        db.commit()
        return record

    return _add


@pytest.fixture
def monthly_netflix(add_transaction) -> Callable[[datetime], None]:
    """Three 15.99 Netflix charges 30 days apart, the last one at `last`"""

    def _add(last: datetime) -> None:
        for offset in (60, 30, 0):
            add_transaction(
                amount="15.99",
                category="entertainment",
                description="Netflix",
                when=last - timedelta(days=offset),
            )

    return _add
