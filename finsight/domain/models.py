"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional


class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class RiskLevel(str, Enum):
    """Risk tier derived from fraud score; also used as alert severity"""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class SubscriptionStatus(str, Enum):
    ACTIVE = "ACTIVE"
    IGNORED = "IGNORED"


@dataclass
class TransactionCandidate:
    """Incoming transaction, not yet scored or persisted"""

    user_id: int
    amount: Decimal
    type: TransactionType
    category: str
    description: Optional[str]
    location: Optional[str]
    transaction_date: datetime


@dataclass
class FraudAssessment:
    """Output of fraud scoring"""

    score: float
    risk_level: RiskLevel
    fraudulent: bool
    reasons: List[str] = field(default_factory=list)


@dataclass
class DetectedSubscription:
    """Recurring monthly payment found in expense history"""

    merchant_key: str
    merchant: str
    avg_amount: Decimal
    last_paid_date: date
    next_due_date: date


@dataclass
class TimeSeriesPoint:
    date: date
    amount: Decimal


@dataclass
class DashboardSummary:
    """Financial and fraud rollup over a transaction window"""

    total_income: Decimal
    total_expenses: Decimal
    current_balance: Decimal
    total_flagged_transactions: int
    average_fraud_score: float
    spending_by_category: Dict[str, Decimal]
    fraud_by_category: Dict[str, int]
    spending_trends: List[TimeSeriesPoint]


@dataclass
class TransactionFilter:
    """Predicate record for transaction search; None/blank values are ignored"""

    user_id: int
    type: Optional[str] = None
    category: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    fraudulent: Optional[bool] = None


@dataclass
class Page:
    """One zero-indexed page of a sorted result set"""

    content: list
    page: int
    size: int
    total_elements: int

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return (self.total_elements + self.size - 1) // self.size
