"""Transaction ingestion and query endpoints"""

import logging
from datetime import date, datetime, time
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from finsight.api.dependencies import get_ingestion_service, get_query_service, get_request_id
from finsight.api.schemas import TransactionPageResponse, TransactionRequest, TransactionResponse
from finsight.domain.exceptions import DomainException, InvalidRequestError
from finsight.domain.models import TransactionFilter, TransactionType
from finsight.services.ingestion import TransactionIngestionService
from finsight.services.transactions import DEFAULT_SORT_FIELD, TransactionQueryService

router = APIRouter()


def _parse_datetime_param(value: Optional[str], name: str, end_of_day: bool = False) -> Optional[datetime]:
    """ISO date or date-time; a bare date covers the whole day"""
    if value is None or not value.strip():
        return None
    value = value.strip()
    try:
        if len(value) == 10:
            day = date.fromisoformat(value)
            return datetime.combine(day, time(23, 59, 59) if end_of_day else time.min)
        return datetime.fromisoformat(value)
    except ValueError:
        raise InvalidRequestError(f"{name} must be an ISO-8601 date or date-time")


def _parse_bool_param(value: Optional[str], name: str) -> Optional[bool]:
    if value is None or not value.strip():
        return None
    lowered = value.strip().lower()
    if lowered in ("true", "1"):
        return True
    if lowered in ("false", "0"):
        return False
    raise InvalidRequestError(f"{name} must be true or false")


def _parse_type_param(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    try:
        return TransactionType(value.strip().upper()).value
    except ValueError:
        raise InvalidRequestError("type must be INCOME or EXPENSE")


@router.post("/transactions", response_model=TransactionResponse, status_code=201)
def create_transaction(
    request_body: TransactionRequest,
    request: Request,
    service: TransactionIngestionService = Depends(get_ingestion_service),
):
    """
    Ingest a transaction.

    Flow:
    1. Score against the user's history
    2. Persist transaction, fraud alert (if flagged) and audit row atomically
    3. Return the stored transaction with its score, risk level and status
    """
    request_id = get_request_id(request)

    try:
        record = service.ingest(
            user_id=request_body.user_id,
            amount=request_body.amount,
            type=request_body.type,
            category=request_body.category,
            description=request_body.description,
            location=request_body.location,
            transaction_date=request_body.transaction_date,
            request_id=request_id,
        )
    except DomainException:
        raise
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    return TransactionResponse.from_record(record)


@router.get("/transactions/user/{user_id}", response_model=List[TransactionResponse])
def get_user_transactions(user_id: int, service: TransactionQueryService = Depends(get_query_service)):
    """All transactions of a user, newest first"""
    return [TransactionResponse.from_record(t) for t in service.list_for_user(user_id)]


@router.get("/transactions/fraud/{user_id}", response_model=List[TransactionResponse])
def get_fraudulent_transactions(user_id: int, service: TransactionQueryService = Depends(get_query_service)):
    """Transactions flagged as fraudulent, newest first"""
    return [TransactionResponse.from_record(t) for t in service.list_fraudulent(user_id)]


@router.get("/transactions", response_model=TransactionPageResponse)
def search_transactions(
    user_id: int = Query(..., alias="userId", description="User identifier"),
    type: Optional[str] = Query(None, description="INCOME or EXPENSE"),
    category: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None, alias="startDate", description="ISO-8601, inclusive"),
    end_date: Optional[str] = Query(None, alias="endDate", description="ISO-8601, inclusive"),
    fraudulent: Optional[str] = Query(None),
    sort_by: str = Query(DEFAULT_SORT_FIELD, alias="sortBy"),
    sort_dir: str = Query("desc", alias="sortDir"),
    page: int = Query(0),
    size: Optional[int] = Query(None),
    service: TransactionQueryService = Depends(get_query_service),
):
    """
    Filtered, sorted and paginated transactions.

    Blank filter values are ignored. Page index is zero-based.
    """
    criteria = TransactionFilter(
        user_id=user_id,
        type=_parse_type_param(type),
        category=category.strip() if category and category.strip() else None,
        start=_parse_datetime_param(start_date, "startDate"),
        end=_parse_datetime_param(end_date, "endDate", end_of_day=True),
        fraudulent=_parse_bool_param(fraudulent, "fraudulent"),
    )
    result = service.search(criteria, sort_by=sort_by, sort_dir=sort_dir, page=page, size=size)
    return TransactionPageResponse.from_page(result)
