"""Subscription detection and lifecycle"""

import logging
from datetime import date, datetime, timedelta
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from finsight.domain.exceptions import ConflictError, InvalidRequestError, NotFoundError
from finsight.domain.models import SubscriptionStatus
from finsight.domain.subscriptions import detect_subscriptions
from finsight.infrastructure.database.models import SubscriptionRecord
from finsight.infrastructure.database.repositories import (
    SubscriptionRepository,
    TransactionRepository,
    UserRepository,
)
from finsight.infrastructure.observability.logging import log_subscriptions_detected
from finsight.infrastructure.observability.metrics import subscriptions_detected_counter
from finsight.services import audit
from finsight.services.audit import AuditLogService

DETECT_ATTEMPTS = 2


class SubscriptionService:
    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)
        self.transactions = TransactionRepository(db)
        self.subscriptions = SubscriptionRepository(db)
        self.audit = AuditLogService(db)

    def _require_user(self, user_id: int) -> None:
        if self.users.get_by_id(user_id) is None:
            raise NotFoundError("User", user_id)

    def detect(self, user_id: int) -> List[SubscriptionRecord]:
        """
        Scan the user's expenses for monthly patterns and store the result as one batch.

        Re-running over the same history updates the same rows instead of
        adding duplicates. A merchant the user has ignored keeps its IGNORED
        row but is left out of the returned list, which holds ACTIVE
        subscriptions only.

        A concurrent run for the same user can insert a merchant between this
        run's read and its insert; the unique constraint rejects the row and the
        whole run is repeated once against the now-committed state.
        """
        for attempt in range(1, DETECT_ATTEMPTS + 1):
            try:
                self._require_user(user_id)
                history = self.transactions.get_by_user(user_id)
                detected = detect_subscriptions(history)
                saved = self.subscriptions.save_detected(user_id, detected, created_at=datetime.now())
                self.db.commit()
                break
            except IntegrityError as e:
                self.db.rollback()
                if attempt == DETECT_ATTEMPTS:
                    raise ConflictError("Subscription detection is already running for this user") from e
                logging.warning(
                    f"Concurrent subscription detection, retrying: {e}",
                    extra={"user_id": user_id, "step": "subscription_detection_retry", "attempt": attempt},
                )
            except Exception:
                self.db.rollback()
                raise

        active = [s for s in saved if s.status == SubscriptionStatus.ACTIVE.value]
        subscriptions_detected_counter.inc(len(active))
        log_subscriptions_detected(user_id, scanned=len(history), detected=len(active))
        return active

    def list_subscriptions(self, user_id: int, status: Optional[SubscriptionStatus] = None) -> List[SubscriptionRecord]:
        self._require_user(user_id)
        return self.subscriptions.find_by_user(user_id, SubscriptionStatus(status).value if status else None)

    def ignore(self, subscription_id: int) -> SubscriptionRecord:
        try:
            subscription = self.subscriptions.get_by_id(subscription_id)
            if subscription is None:
                raise NotFoundError("Subscription", subscription_id)

            self.subscriptions.set_status(subscription, SubscriptionStatus.IGNORED)
            self.audit.log_action(
                user_id=subscription.user_id,
                action=audit.IGNORE_SUBSCRIPTION,
                entity_type=audit.ENTITY_SUBSCRIPTION,
                entity_id=subscription.id,
                details={"subscriptionId": subscription.id, "merchant": subscription.merchant},
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return subscription

    def due_soon(self, user_id: int, days: int, today: Optional[date] = None) -> List[SubscriptionRecord]:
        """ACTIVE subscriptions due within [today, today + days]"""
        if days < 0:
            raise InvalidRequestError("days must not be negative")
        self._require_user(user_id)

        today = today or date.today()
        return self.subscriptions.find_due_between(user_id, today, today + timedelta(days=days))
