"""Fraud alert queries and resolution"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from finsight.domain.exceptions import NotFoundError
from finsight.domain.models import RiskLevel
from finsight.infrastructure.database.models import FraudAlertRecord
from finsight.infrastructure.database.repositories import FraudAlertRepository, UserRepository
from finsight.services import audit
from finsight.services.audit import AuditLogService


class FraudAlertService:
    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)
        self.alerts = FraudAlertRepository(db)
        self.audit = AuditLogService(db)

    def list_alerts(
        self,
        user_id: int,
        resolved: Optional[bool] = None,
        severity: Optional[RiskLevel] = None,
    ) -> List[FraudAlertRecord]:
        """A user's alerts, newest first, optionally filtered by resolved and/or severity"""
        if self.users.get_by_id(user_id) is None:
            raise NotFoundError("User", user_id)
        return self.alerts.find_by_user(
            user_id,
            resolved=resolved,
            severity=RiskLevel(severity).value if severity else None,
        )

    def resolve(self, alert_id: int) -> FraudAlertRecord:
        """Mark an alert resolved and audit it. Resolving twice is a no-op apart from the audit row."""
        try:
            alert = self.alerts.get_by_id(alert_id)
            if alert is None:
                raise NotFoundError("Fraud alert", alert_id)

            self.alerts.mark_resolved(alert)
            self.audit.log_action(
                user_id=alert.user_id,
                action=audit.RESOLVE_FRAUD_ALERT,
                entity_type=audit.ENTITY_FRAUD_ALERT,
                entity_id=alert.id,
                details={"alertId": alert.id, "severity": alert.severity},
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logging.info("Fraud alert resolved", extra={"alert_id": alert_id, "user_id": alert.user_id})
        return alert
