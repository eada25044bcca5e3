"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from finsight.domain.fraud_scoring import determine_risk_level
from finsight.domain.models import DashboardSummary, Page, TransactionType
from finsight.infrastructure.database.models import (
    FraudAlertRecord,
    SubscriptionRecord,
    TransactionRecord,
    UserRecord,
)

# Amounts travel as JSON numbers, not strings
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Accounts ---


class RegisterRequest(ApiModel):
    """Request body for POST /auth/register"""

    username: str = Field(..., min_length=3, max_length=50)
    email: str = Field(..., max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=8, max_length=72)
    full_name: Optional[str] = Field(None, max_length=255)


class LoginRequest(ApiModel):
    """Request body for POST /auth/login"""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1, max_length=72)


class UserResponse(ApiModel):
    id: int
    username: str
    email: str
    full_name: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_record(cls, user: UserRecord) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            full_name=user.full_name,
            created_at=user.created_at,
        )


class LoginResponse(ApiModel):
    token: str
    user: UserResponse
    demo_seeded: bool = False


# --- Transactions ---


class TransactionRequest(ApiModel):
    """Request body for POST /transactions"""

    user_id: int = Field(..., gt=0, description="Owning user")
    amount: Decimal = Field(..., ge=0, max_digits=19, decimal_places=2)
    type: TransactionType
    category: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=255)
    location: Optional[str] = Field(None, max_length=100)
    transaction_date: Optional[datetime] = Field(None, description="Defaults to now")


class TransactionResponse(ApiModel):
    id: int
    user_id: int
    amount: Money
    type: str
    category: str
    description: Optional[str] = None
    location: Optional[str] = None
    transaction_date: datetime
    fraudulent: bool
    fraud_score: Optional[float] = None
    risk_level: Optional[str] = None
    status: str
    created_at: datetime

    @classmethod
    def from_record(cls, txn: TransactionRecord) -> "TransactionResponse":
        return cls(
            id=txn.id,
            user_id=txn.user_id,
            amount=txn.amount,
            type=txn.type,
            category=txn.category,
            description=txn.description,
            location=txn.location,
            transaction_date=txn.transaction_date,
            fraudulent=txn.fraudulent,
            fraud_score=txn.fraud_score,
            risk_level=determine_risk_level(txn.fraud_score).value if txn.fraud_score is not None else None,
            status="FLAGGED" if txn.fraudulent else "COMPLETED",
            created_at=txn.created_at,
        )


class TransactionPageResponse(ApiModel):
    """Response for GET /transactions"""

    content: List[TransactionResponse]
    page: int
    size: int
    total_elements: int
    total_pages: int

    @classmethod
    def from_page(cls, page: Page) -> "TransactionPageResponse":
        return cls(
            content=[TransactionResponse.from_record(t) for t in page.content],
            page=page.page,
            size=page.size,
            total_elements=page.total_elements,
            total_pages=page.total_pages,
        )


# --- Dashboard ---


class TimeSeriesPointSchema(ApiModel):
    date: date
    amount: Money


class DashboardSummaryResponse(ApiModel):
    """Response for GET /dashboard/summary"""

    total_income: Money
    total_expenses: Money
    current_balance: Money
    total_flagged_transactions: int
    average_fraud_score: float
    spending_by_category: Dict[str, Money]
    fraud_by_category: Dict[str, int]
    spending_trends: List[TimeSeriesPointSchema]

    @classmethod
    def from_summary(cls, summary: DashboardSummary) -> "DashboardSummaryResponse":
        return cls(
            total_income=summary.total_income,
            total_expenses=summary.total_expenses,
            current_balance=summary.current_balance,
            total_flagged_transactions=summary.total_flagged_transactions,
            average_fraud_score=summary.average_fraud_score,
            spending_by_category=summary.spending_by_category,
            fraud_by_category=summary.fraud_by_category,
            spending_trends=[
                TimeSeriesPointSchema(date=p.date, amount=p.amount) for p in summary.spending_trends
            ],
        )


# --- Fraud alerts ---


class FraudAlertResponse(ApiModel):
    id: int
    user_id: int
    transaction_id: int
    message: str
    severity: str
    resolved: bool
    created_at: datetime
    transaction: Optional[TransactionResponse] = None

    @classmethod
    def from_record(cls, alert: FraudAlertRecord) -> "FraudAlertResponse":
        return cls(
            id=alert.id,
            user_id=alert.user_id,
            transaction_id=alert.transaction_id,
            message=alert.message,
            severity=alert.severity,
            resolved=alert.resolved,
            created_at=alert.created_at,
            transaction=TransactionResponse.from_record(alert.transaction) if alert.transaction else None,
        )


# --- Subscriptions ---


class DetectRequest(ApiModel):
    """Request body for POST /subscriptions/detect"""

    user_id: int = Field(..., gt=0)


class SubscriptionResponse(ApiModel):
    id: int
    user_id: int
    merchant: str
    avg_amount: Money
    last_paid_date: date
    next_due_date: date
    status: str
    created_at: datetime

    @classmethod
    def from_record(cls, sub: SubscriptionRecord) -> "SubscriptionResponse":
        return cls(
            id=sub.id,
            user_id=sub.user_id,
            merchant=sub.merchant,
            avg_amount=sub.avg_amount,
            last_paid_date=sub.last_paid_date,
            next_due_date=sub.next_due_date,
            status=sub.status,
            created_at=sub.created_at,
        )
