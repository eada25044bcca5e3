"""Subscription detection, listing and due-soon endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from finsight.api.dependencies import get_subscription_service
from finsight.api.schemas import DetectRequest, SubscriptionResponse
from finsight.config import settings
from finsight.domain.models import SubscriptionStatus
from finsight.services.subscriptions import SubscriptionService

router = APIRouter()


@router.post("/subscriptions/detect", response_model=List[SubscriptionResponse])
def detect_subscriptions(
    request_body: DetectRequest,
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Scan the user's expenses for monthly charges and store the results"""
    return [SubscriptionResponse.from_record(s) for s in service.detect(request_body.user_id)]


@router.get("/subscriptions", response_model=List[SubscriptionResponse])
def list_subscriptions(
    user_id: int = Query(..., alias="userId"),
    status: Optional[SubscriptionStatus] = Query(None, description="ACTIVE or IGNORED"),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return [SubscriptionResponse.from_record(s) for s in service.list_subscriptions(user_id, status)]


@router.get("/subscriptions/due-soon", response_model=List[SubscriptionResponse])
def get_due_soon(
    user_id: int = Query(..., alias="userId"),
    days: int = Query(settings.due_soon_default_days, ge=0),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """ACTIVE subscriptions whose next due date is within the coming `days` days"""
    return [SubscriptionResponse.from_record(s) for s in service.due_soon(user_id, days)]


@router.put("/subscriptions/{subscription_id}/ignore", response_model=SubscriptionResponse)
def ignore_subscription(
    subscription_id: int,
    service: SubscriptionService = Depends(get_subscription_service),
):
    return SubscriptionResponse.from_record(service.ignore(subscription_id))
