"""Audit trail for user-visible state changes"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from finsight.infrastructure.database.models import AuditLogRecord
from finsight.infrastructure.database.repositories import AuditLogRepository

CREATE_TRANSACTION = "CREATE_TRANSACTION"
RESOLVE_FRAUD_ALERT = "RESOLVE_FRAUD_ALERT"
IGNORE_SUBSCRIPTION = "IGNORE_SUBSCRIPTION"

ENTITY_TRANSACTION = "TRANSACTION"
ENTITY_FRAUD_ALERT = "FRAUD_ALERT"
ENTITY_SUBSCRIPTION = "SUBSCRIPTION"


def compact_json(details: Dict[str, Any]) -> str:
    return json.dumps(details, separators=(",", ":"), default=str)


class AuditLogService:
    """Appends audit rows inside the caller's unit of work (no commit here)"""

    def __init__(self, db: Session):
        self.repo = AuditLogRepository(db)

    def log_action(
        self,
        user_id: int,
        action: str,
        entity_type: str,
        entity_id: Optional[int],
        details: Dict[str, Any],
    ) -> AuditLogRecord:
        entry = self.repo.append(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=compact_json(details),
            timestamp=datetime.now(timezone.utc),
        )
        logging.info(
            "Audit log created",
            extra={"user_id": user_id, "action": action, "entity_type": entity_type, "entity_id": entity_id},
        )
        return entry
