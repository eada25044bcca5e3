"""Fraud alert listing and resolution"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from finsight.api.dependencies import get_fraud_alert_service
from finsight.api.schemas import FraudAlertResponse
from finsight.domain.models import RiskLevel
from finsight.services.fraud_alerts import FraudAlertService

router = APIRouter()


@router.get("/fraud/alerts", response_model=List[FraudAlertResponse])
def get_alerts(
    user_id: int = Query(..., alias="userId", description="User identifier"),
    resolved: Optional[bool] = Query(None),
    severity: Optional[RiskLevel] = Query(None, description="LOW, MEDIUM or HIGH"),
    service: FraudAlertService = Depends(get_fraud_alert_service),
):
    """Alerts for a user, newest first"""
    alerts = service.list_alerts(user_id, resolved=resolved, severity=severity)
    return [FraudAlertResponse.from_record(a) for a in alerts]


@router.put("/fraud/alerts/{alert_id}/resolve", response_model=FraudAlertResponse)
def resolve_alert(alert_id: int, service: FraudAlertService = Depends(get_fraud_alert_service)):
    return FraudAlertResponse.from_record(service.resolve(alert_id))
