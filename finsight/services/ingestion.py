"""Transaction ingestion: score, persist, alert and audit in one unit of work"""

import time
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from finsight.config import settings
from finsight.domain.exceptions import NotFoundError
from finsight.domain.fraud_scoring import build_alert_message, score_transaction
from finsight.domain.models import FraudAssessment, TransactionCandidate, TransactionType
from finsight.infrastructure.database.models import FraudAlertRecord, TransactionRecord
from finsight.infrastructure.database.repositories import (
    FraudAlertRepository,
    TransactionRepository,
    UserRepository,
)
from finsight.infrastructure.observability.logging import log_alert_persist_failure, log_transaction_ingested
from finsight.infrastructure.observability.metrics import (
    alert_persist_failures_counter,
    fraud_alerts_counter,
    record_ingestion,
)
from finsight.services import audit
from finsight.services.audit import AuditLogService
from finsight.utils.date_utils import to_local_naive


class TransactionIngestionService:
    """Accepts new transactions and keeps the fraud invariants intact"""

    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)
        self.transactions = TransactionRepository(db)
        self.alerts = FraudAlertRepository(db)
        self.audit = AuditLogService(db)

    def ingest(
        self,
        user_id: int,
        amount: Decimal,
        type: TransactionType,
        category: str,
        description: Optional[str] = None,
        location: Optional[str] = None,
        transaction_date: Optional[datetime] = None,
        request_id: str = "unknown",
    ) -> TransactionRecord:
        """
        Create a scored transaction.

        Flow:
        1. Resolve the user
        2. Score the candidate against the user's stored history
        3. Persist the transaction
        4. Persist a fraud alert if flagged (inside a savepoint)
        5. Append the CREATE_TRANSACTION audit row
        6. Commit once

        A failed alert insert is logged and counted; everything else rolls
        back the whole unit of work and propagates.
        """
        start_time = time.time()

        try:
            user = self.users.get_by_id(user_id)
            if user is None:
                raise NotFoundError("User", user_id)

            now = datetime.now()
            candidate = TransactionCandidate(
                user_id=user.id,
                amount=amount,
                type=TransactionType(type),
                category=category,
                description=description,
                location=location,
                transaction_date=to_local_naive(transaction_date) if transaction_date else now,
            )

            assessment = score_transaction(candidate, self.transactions)

            record = self.transactions.create_transaction(
                candidate,
                fraud_score=assessment.score,
                fraudulent=assessment.fraudulent,
                created_at=now,
            )

            if assessment.fraudulent and assessment.reasons:
                self._raise_alert(record, assessment, now, request_id)

            self.audit.log_action(
                user_id=user.id,
                action=audit.CREATE_TRANSACTION,
                entity_type=audit.ENTITY_TRANSACTION,
                entity_id=record.id,
                details={
                    "amount": str(record.amount),
                    "type": record.type,
                    "category": record.category,
                    "fraudulent": record.fraudulent,
                },
            )

            self.db.commit()

        except Exception:
            self.db.rollback()
            raise

        duration_ms = (time.time() - start_time) * 1000
        record_ingestion(assessment.score, assessment.fraudulent)
        log_transaction_ingested(
            request_id,
            record.user_id,
            record.id,
            assessment.score,
            assessment.risk_level.value,
            assessment.fraudulent,
            duration_ms,
        )
        return record

    def _raise_alert(
        self,
        record: TransactionRecord,
        assessment: FraudAssessment,
        now: datetime,
        request_id: str,
    ) -> Optional[FraudAlertRecord]:
        try:
            with self.db.begin_nested():
                alert = self.alerts.create_alert(
                    user_id=record.user_id,
                    transaction_id=record.id,
                    message=build_alert_message(assessment.reasons, settings.alert_message_max_length),
                    severity=assessment.risk_level.value,
                    created_at=now,
                )
        except SQLAlchemyError as e:
            alert_persist_failures_counter.inc()
            log_alert_persist_failure(request_id, record.user_id, record.id, e)
            return None

        fraud_alerts_counter.labels(severity=alert.severity).inc()
        return alert
