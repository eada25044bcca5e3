"""Data access layer for users, transactions, alerts, subscriptions and audit rows"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Set, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from finsight.domain.models import (
    DetectedSubscription,
    SubscriptionStatus,
    TransactionCandidate,
    TransactionFilter,
)
from finsight.infrastructure.database.models import (
    AuditLogRecord,
    FraudAlertRecord,
    SubscriptionRecord,
    TransactionRecord,
    UserRecord,
)


class UserRepository:
    """Repository for user accounts"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> Optional[UserRecord]:
        return self.db.get(UserRecord, user_id)

    def get_by_username(self, username: str) -> Optional[UserRecord]:
        return self.db.query(UserRecord).filter(UserRecord.username == username).first()

    def get_by_email(self, email: str) -> Optional[UserRecord]:
        return self.db.query(UserRecord).filter(UserRecord.email == email).first()

    def create_user(
        self, username: str, email: str, full_name: Optional[str], password_hash: str, created_at: datetime
    ) -> UserRecord:
        user = UserRecord(
            username=username,
            email=email,
            full_name=full_name,
            password_hash=password_hash,
            created_at=created_at,
        )
        self.db.add(user)
        self.db.flush()
        return user


class TransactionRepository:
    """
    Repository for transactions.

    Also serves as the read-only history view used by fraud scoring
    (average_amount, count_in_window, most_recent, distinct_categories).
    """

    SORTABLE_FIELDS = {
        "id": TransactionRecord.id,
        "userId": TransactionRecord.user_id,
        "user_id": TransactionRecord.user_id,
        "amount": TransactionRecord.amount,
        "type": TransactionRecord.type,
        "category": TransactionRecord.category,
        "description": TransactionRecord.description,
        "location": TransactionRecord.location,
        "transactionDate": TransactionRecord.transaction_date,
        "transaction_date": TransactionRecord.transaction_date,
        "fraudulent": TransactionRecord.fraudulent,
        "fraudScore": TransactionRecord.fraud_score,
        "fraud_score": TransactionRecord.fraud_score,
        "createdAt": TransactionRecord.created_at,
        "created_at": TransactionRecord.created_at,
    }

    def __init__(self, db: Session):
        self.db = db

    def create_transaction(
        self,
        candidate: TransactionCandidate,
        fraud_score: float,
        fraudulent: bool,
        created_at: datetime,
    ) -> TransactionRecord:
        """Persist a scored transaction (flush only; the caller commits)"""
        record = TransactionRecord(
            user_id=candidate.user_id,
            amount=candidate.amount,
            type=candidate.type.value,
            category=candidate.category,
            description=candidate.description,
            location=candidate.location,
            transaction_date=candidate.transaction_date,
            fraudulent=fraudulent,
            fraud_score=fraud_score,
            created_at=created_at,
        )
        self.db.add(record)
        self.db.flush()  # Get ID without committing
        return record

    def get_by_user(self, user_id: int) -> List[TransactionRecord]:
        return self.db.query(TransactionRecord).filter(TransactionRecord.user_id == user_id).all()

    def get_by_user_newest_first(self, user_id: int) -> List[TransactionRecord]:
        return (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.user_id == user_id)
            .order_by(TransactionRecord.transaction_date.desc(), TransactionRecord.id.desc())
            .all()
        )

    def get_fraudulent_by_user(self, user_id: int) -> List[TransactionRecord]:
        return (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.user_id == user_id, TransactionRecord.fraudulent.is_(True))
            .order_by(TransactionRecord.transaction_date.desc(), TransactionRecord.id.desc())
            .all()
        )

    def get_by_user_between(
        self, user_id: int, start: Optional[datetime], end: Optional[datetime]
    ) -> List[TransactionRecord]:
        """Transactions with start <= transaction_date <= end; None leaves a side open"""
        query = self.db.query(TransactionRecord).filter(TransactionRecord.user_id == user_id)
        if start is not None:
            query = query.filter(TransactionRecord.transaction_date >= start)
        if end is not None:
            query = query.filter(TransactionRecord.transaction_date <= end)
        return query.all()

    def average_amount(self, user_id: int) -> Optional[Decimal]:
        """Mean amount over all of the user's transactions, None when there are none"""
        total, count = (
            self.db.query(func.sum(TransactionRecord.amount), func.count(TransactionRecord.id))
            .filter(TransactionRecord.user_id == user_id)
            .one()
        )
        if not count:
            return None
        return Decimal(str(total)) / count

    def count_in_window(self, user_id: int, start: datetime, end: datetime) -> int:
        return (
            self.db.query(func.count(TransactionRecord.id))
            .filter(
                TransactionRecord.user_id == user_id,
                TransactionRecord.transaction_date >= start,
                TransactionRecord.transaction_date <= end,
            )
            .scalar()
        )

    def most_recent(self, user_id: int) -> Optional[TransactionRecord]:
        return (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.user_id == user_id)
            .order_by(TransactionRecord.transaction_date.desc(), TransactionRecord.id.desc())
            .first()
        )

    def distinct_categories(self, user_id: int) -> Set[str]:
        rows = (
            self.db.query(TransactionRecord.category)
            .filter(TransactionRecord.user_id == user_id)
            .distinct()
            .all()
        )
        return {row[0] for row in rows}

    def search(
        self,
        criteria: TransactionFilter,
        sort_by: str,
        descending: bool,
        page: int,
        size: int,
    ) -> Tuple[List[TransactionRecord], int]:
        """
        Filtered, sorted page of a user's transactions.

        Returns the page content and the total number of matching rows.
        sort_by must be a key of SORTABLE_FIELDS.
        """
        query = self.db.query(TransactionRecord).filter(TransactionRecord.user_id == criteria.user_id)

        if criteria.type and criteria.type.strip():
            query = query.filter(TransactionRecord.type == criteria.type)
        if criteria.category and criteria.category.strip():
            query = query.filter(TransactionRecord.category == criteria.category)
        if criteria.start is not None:
            query = query.filter(TransactionRecord.transaction_date >= criteria.start)
        if criteria.end is not None:
            query = query.filter(TransactionRecord.transaction_date <= criteria.end)
        if criteria.fraudulent is not None:
            query = query.filter(TransactionRecord.fraudulent.is_(criteria.fraudulent))

        total = query.count()

        column = self.SORTABLE_FIELDS[sort_by]
        ordering = column.desc() if descending else column.asc()
        tiebreak = TransactionRecord.id.desc() if descending else TransactionRecord.id.asc()

        content = query.order_by(ordering, tiebreak).offset(page * size).limit(size).all()
        return content, total


class FraudAlertRepository:
    """Repository for fraud alerts"""

    def __init__(self, db: Session):
        self.db = db

    def create_alert(
        self, user_id: int, transaction_id: int, message: str, severity: str, created_at: datetime
    ) -> FraudAlertRecord:
        alert = FraudAlertRecord(
            user_id=user_id,
            transaction_id=transaction_id,
            message=message,
            severity=severity,
            resolved=False,
            created_at=created_at,
        )
        self.db.add(alert)
        self.db.flush()
        return alert

    def get_by_id(self, alert_id: int) -> Optional[FraudAlertRecord]:
        return self.db.get(FraudAlertRecord, alert_id)

    def find_by_user(
        self, user_id: int, resolved: Optional[bool] = None, severity: Optional[str] = None
    ) -> List[FraudAlertRecord]:
        """Alerts for a user, newest first, optionally filtered"""
        query = self.db.query(FraudAlertRecord).filter(FraudAlertRecord.user_id == user_id)
        if resolved is not None:
            query = query.filter(FraudAlertRecord.resolved.is_(resolved))
        if severity:
            query = query.filter(FraudAlertRecord.severity == severity)
        return query.order_by(FraudAlertRecord.created_at.desc(), FraudAlertRecord.id.desc()).all()

    def mark_resolved(self, alert: FraudAlertRecord) -> FraudAlertRecord:
        alert.resolved = True
        self.db.flush()
        return alert


class SubscriptionRepository:
    """Repository for detected subscriptions"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, subscription_id: int) -> Optional[SubscriptionRecord]:
        return self.db.get(SubscriptionRecord, subscription_id)

    def get_by_merchant_key(self, user_id: int, merchant_key: str) -> Optional[SubscriptionRecord]:
        return (
            self.db.query(SubscriptionRecord)
            .filter(SubscriptionRecord.user_id == user_id, SubscriptionRecord.merchant_key == merchant_key)
            .first()
        )

    def save_detected(
        self, user_id: int, detected: List[DetectedSubscription], created_at: datetime
    ) -> List[SubscriptionRecord]:
        """
        Upsert a detection run's results.

        A merchant seen by an earlier run keeps its row (id, status and
        created_at); only the derived amount and dates are refreshed.
        """
        saved = []
        for item in detected:
            record = self.get_by_merchant_key(user_id, item.merchant_key)
            if record is None:
                record = SubscriptionRecord(
                    user_id=user_id,
                    merchant_key=item.merchant_key,
                    status=SubscriptionStatus.ACTIVE.value,
                    created_at=created_at,
                )
                self.db.add(record)
            record.merchant = item.merchant
            record.avg_amount = item.avg_amount
            record.last_paid_date = item.last_paid_date
            record.next_due_date = item.next_due_date
            saved.append(record)

        self.db.flush()
        return saved

    def find_by_user(self, user_id: int, status: Optional[str] = None) -> List[SubscriptionRecord]:
        query = self.db.query(SubscriptionRecord).filter(SubscriptionRecord.user_id == user_id)
        if status:
            query = query.filter(SubscriptionRecord.status == status)
        return query.order_by(SubscriptionRecord.next_due_date.asc(), SubscriptionRecord.id.asc()).all()

    def find_due_between(self, user_id: int, start: date, end: date) -> List[SubscriptionRecord]:
        """ACTIVE subscriptions with start <= next_due_date <= end"""
        return (
            self.db.query(SubscriptionRecord)
            .filter(
                SubscriptionRecord.user_id == user_id,
                SubscriptionRecord.status == SubscriptionStatus.ACTIVE.value,
                SubscriptionRecord.next_due_date >= start,
                SubscriptionRecord.next_due_date <= end,
            )
            .order_by(SubscriptionRecord.next_due_date.asc(), SubscriptionRecord.id.asc())
            .all()
        )

    def set_status(self, subscription: SubscriptionRecord, status: SubscriptionStatus) -> SubscriptionRecord:
        subscription.status = status.value
        self.db.flush()
        return subscription


class AuditLogRepository:
    """Append-only audit trail"""

    def __init__(self, db: Session):
        self.db = db

    def append(
        self,
        user_id: int,
        action: str,
        entity_type: str,
        entity_id: Optional[int],
        details: Optional[str],
        timestamp: datetime,
    ) -> AuditLogRecord:
        entry = AuditLogRecord(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
            timestamp=timestamp,
        )
        self.db.add(entry)
        self.db.flush()
        return entry
