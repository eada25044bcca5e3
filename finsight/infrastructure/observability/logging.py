"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger.json import JsonFormatter

from finsight.config import settings


class CustomJsonFormatter(JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_transaction_ingested(
    request_id: str,
    user_id: int,
    transaction_id: int,
    fraud_score: float,
    risk_level: str,
    flagged: bool,
    duration_ms: float,
) -> None:
    """Log structured ingestion outcome for analysis"""
    logging.info(
        "Transaction ingested",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "transaction_id": transaction_id,
            "step": "ingestion_complete",
            "fraud_score": fraud_score,
            "risk_level": risk_level,
            "outcome": "flagged" if flagged else "completed",
            "duration_ms": duration_ms,
        },
    )


def log_alert_persist_failure(request_id: str, user_id: int, transaction_id: int, error: Exception) -> None:
    """Alert could not be stored; the transaction itself is kept"""
    logging.error(
        f"Failed to persist fraud alert: {error}",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "transaction_id": transaction_id,
            "step": "alert_persist_failed",
        },
    )


def log_subscriptions_detected(user_id: int, scanned: int, detected: int) -> None:
    logging.info(
        "Subscription detection completed",
        extra={
            "user_id": user_id,
            "step": "subscription_detection",
            "transactions_scanned": scanned,
            "subscriptions_detected": detected,
        },
    )
