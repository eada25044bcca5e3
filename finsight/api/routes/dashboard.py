"""GET /dashboard/summary - income, expense and fraud rollups"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from finsight.api.dependencies import get_dashboard_service
from finsight.api.schemas import DashboardSummaryResponse
from finsight.services.dashboard import DashboardService

router = APIRouter()


@router.get("/dashboard/summary", response_model=DashboardSummaryResponse)
def get_summary(
    user_id: int = Query(..., alias="userId", description="User identifier"),
    start_date: Optional[date] = Query(None, alias="startDate", description="Inclusive, from 00:00:00"),
    end_date: Optional[date] = Query(None, alias="endDate", description="Inclusive, until 23:59:59"),
    service: DashboardService = Depends(get_dashboard_service),
):
    """
    Summarize a user's transactions in an optional date window.

    Returns:
        Totals, balance, fraud metrics, per-category breakdowns and a daily
        spending series
    """
    summary = service.get_summary(user_id, start_date, end_date)
    return DashboardSummaryResponse.from_summary(summary)
