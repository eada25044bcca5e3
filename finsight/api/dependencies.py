"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from finsight.infrastructure.database.session import get_db
from finsight.services.accounts import AccountService
from finsight.services.dashboard import DashboardService
from finsight.services.fraud_alerts import FraudAlertService
from finsight.services.ingestion import TransactionIngestionService
from finsight.services.subscriptions import SubscriptionService
from finsight.services.transactions import TransactionQueryService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_account_service(db: Session = Depends(get_db)) -> AccountService:
    return AccountService(db)


def get_ingestion_service(db: Session = Depends(get_db)) -> TransactionIngestionService:
    return TransactionIngestionService(db)


def get_query_service(db: Session = Depends(get_db)) -> TransactionQueryService:
    return TransactionQueryService(db)


def get_dashboard_service(db: Session = Depends(get_db)) -> DashboardService:
    return DashboardService(db)


def get_fraud_alert_service(db: Session = Depends(get_db)) -> FraudAlertService:
    return FraudAlertService(db)


def get_subscription_service(db: Session = Depends(get_db)) -> SubscriptionService:
    return SubscriptionService(db)
