"""Integration tests for transaction ingestion"""

import json
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from sqlalchemy.exc import SQLAlchemyError
from finsight.domain.exceptions import NotFoundError
from finsight.domain.models import TransactionType
from finsight.infrastructure.database.models import AuditLogRecord, FraudAlertRecord, TransactionRecord
from finsight.infrastructure.database.repositories import FraudAlertRepository
from finsight.services.ingestion import TransactionIngestionService

pytestmark = pytest.mark.integration

T0 = datetime(2024, 3, 15, 12, 0, 0)


@pytest.fixture
def burst_of_small_groceries(add_transaction):
    """Five 10.00 grocery payments in the five minutes before T0"""
    for minutes in range(1, 6):
        add_transaction(amount="10.00", category="groceries", when=T0 - timedelta(minutes=minutes))


def test_flagged_transaction_gets_alert_and_audit(db, user, burst_of_small_groceries):
    service = TransactionIngestionService(db)

    record = service.ingest(
        user_id=user.id,
        amount=Decimal("100.00"),
        type=TransactionType.EXPENSE,
        category="luxury",
        description="Watch shop",
        transaction_date=T0,
    )

    # 30 (amount) + 25 (velocity) + 20 (new category)
    assert record.fraud_score == 75.0
    assert record.fraudulent is True

    alerts = db.query(FraudAlertRecord).all()
    assert len(alerts) == 1
    alert = alerts[0]
    assert alert.transaction_id == record.id
    assert alert.user_id == user.id
    assert alert.severity == "HIGH"
    assert alert.resolved is False
    assert alert.message == (
        "Fraud detected: Amount exceeds 3x user average, 5+ transactions in 10 minutes, New category for user"
    )

    audit_rows = db.query(AuditLogRecord).all()
    assert len(audit_rows) == 1
    assert audit_rows[0].action == "CREATE_TRANSACTION"
    assert audit_rows[0].entity_type == "TRANSACTION"
    assert audit_rows[0].entity_id == record.id
    assert json.loads(audit_rows[0].details) == {
        "amount": "100.00",
        "type": "EXPENSE",
        "category": "luxury",
        "fraudulent": True,
    }


def test_clean_transaction_has_no_alert(db, user, add_transaction):
    add_transaction(amount="40.00", category="groceries", when=T0 - timedelta(days=3))

    record = TransactionIngestionService(db).ingest(
        user_id=user.id,
        amount=Decimal("45.00"),
        type=TransactionType.EXPENSE,
        category="groceries",
        transaction_date=T0,
    )

    assert record.fraud_score == 0.0
    assert record.fraudulent is False
    assert db.query(FraudAlertRecord).count() == 0
    assert db.query(AuditLogRecord).count() == 1


def test_location_jump_scored_against_stored_history(db, user, add_transaction):
    add_transaction(amount="20.00", category="food", location="London", when=T0 - timedelta(minutes=45))

    record = TransactionIngestionService(db).ingest(
        user_id=user.id,
        amount=Decimal("20.00"),
        type=TransactionType.EXPENSE,
        category="food",
        location="Tokyo",
        transaction_date=T0,
    )

    assert record.fraud_score == 25.0
    assert record.fraudulent is False


def test_first_transaction_only_scores_new_category(db, user):
    record = TransactionIngestionService(db).ingest(
        user_id=user.id,
        amount=Decimal("5000.00"),
        type=TransactionType.INCOME,
        category="salary",
        transaction_date=T0,
    )

    assert record.fraud_score == 20.0


def test_transaction_date_defaults_to_now(db, user):
    before = datetime.now()
    record = TransactionIngestionService(db).ingest(
        user_id=user.id, amount=Decimal("1.00"), type=TransactionType.EXPENSE, category="misc"
    )
    after = datetime.now()

    assert before <= record.transaction_date <= after
    assert before <= record.created_at <= after


def test_aware_transaction_date_stored_as_local_time(db, user):
    aware = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)

    record = TransactionIngestionService(db).ingest(
        user_id=user.id,
        amount=Decimal("1.00"),
        type=TransactionType.EXPENSE,
        category="misc",
        transaction_date=aware,
    )

    assert record.transaction_date == aware.astimezone().replace(tzinfo=None)


def test_unknown_user_persists_nothing(db, user):
    with pytest.raises(NotFoundError) as exc_info:
        TransactionIngestionService(db).ingest(
            user_id=9999, amount=Decimal("10.00"), type=TransactionType.EXPENSE, category="misc"
        )

    assert str(exc_info.value) == "User not found with id: 9999"
    assert db.query(TransactionRecord).count() == 0
    assert db.query(AuditLogRecord).count() == 0


def test_alert_failure_keeps_transaction(db, user, burst_of_small_groceries, monkeypatch):
    def failing_create_alert(self, **kwargs):
        raise SQLAlchemyError("alert table unavailable")

    monkeypatch.setattr(FraudAlertRepository, "create_alert", failing_create_alert)

    record = TransactionIngestionService(db).ingest(
        user_id=user.id,
        amount=Decimal("100.00"),
        type=TransactionType.EXPENSE,
        category="luxury",
        transaction_date=T0,
    )

    stored = db.get(TransactionRecord, record.id)
    assert stored is not None
    assert stored.fraudulent is True
    assert db.query(FraudAlertRecord).count() == 0
    assert db.query(AuditLogRecord).filter(AuditLogRecord.entity_id == record.id).count() == 1


def test_audit_failure_rolls_back_everything(db, user, monkeypatch):
    def failing_log_action(self, **kwargs):
        raise SQLAlchemyError("audit table unavailable")

    monkeypatch.setattr("finsight.services.audit.AuditLogService.log_action", failing_log_action)

    with pytest.raises(SQLAlchemyError):
        TransactionIngestionService(db).ingest(
            user_id=user.id, amount=Decimal("10.00"), type=TransactionType.EXPENSE, category="misc"
        )

    assert db.query(TransactionRecord).count() == 0
