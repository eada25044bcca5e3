"""Dashboard rollups over a window of transactions"""

from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Protocol

from finsight.domain.models import DashboardSummary, TimeSeriesPoint, TransactionType
from finsight.utils.money import ZERO, round_money


class Summarizable(Protocol):
    amount: Decimal
    type: str
    category: str
    fraudulent: bool
    fraud_score: Optional[float]
    transaction_date: datetime


def _is_expense(txn: Summarizable) -> bool:
    return txn.type == TransactionType.EXPENSE.value


def _is_income(txn: Summarizable) -> bool:
    return txn.type == TransactionType.INCOME.value


def average_fraud_score(transactions: List[Summarizable]) -> float:
    """Mean of the scores that are set, half-up to 2 places; 0 when none are set"""
    scores = [t.fraud_score for t in transactions if t.fraud_score is not None]
    if not scores:
        return 0.0
    return float(round_money(sum(scores) / len(scores)))


def spending_by_category(transactions: List[Summarizable]) -> Dict[str, Decimal]:
    totals: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    for txn in transactions:
        if _is_expense(txn):
            totals[txn.category] += txn.amount
    return dict(totals)


def fraud_by_category(transactions: List[Summarizable]) -> Dict[str, int]:
    counts: Dict[str, int] = defaultdict(int)
    for txn in transactions:
        if txn.fraudulent:
            counts[txn.category] += 1
    return dict(counts)


def spending_trends(transactions: List[Summarizable]) -> List[TimeSeriesPoint]:
    """One point per local date with expenses, ascending"""
    by_day: Dict[date, Decimal] = defaultdict(lambda: ZERO)
    for txn in transactions:
        if _is_expense(txn):
            by_day[txn.transaction_date.date()] += txn.amount
    return [TimeSeriesPoint(date=day, amount=amount) for day, amount in sorted(by_day.items())]


def build_summary(transactions: Iterable[Summarizable]) -> DashboardSummary:
    """
    Aggregate income, expenses and fraud metrics.

    The caller is responsible for restricting the input to the requested
    date window. Totals are exact decimal sums, so
    total_income - total_expenses == current_balance and the category
    breakdown sums to total_expenses.
    """
    txns = list(transactions)

    total_income = sum((t.amount for t in txns if _is_income(t)), ZERO)
    total_expenses = sum((t.amount for t in txns if _is_expense(t)), ZERO)

    return DashboardSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        current_balance=total_income - total_expenses,
        total_flagged_transactions=sum(1 for t in txns if t.fraudulent),
        average_fraud_score=average_fraud_score(txns),
        spending_by_category=spending_by_category(txns),
        fraud_by_category=fraud_by_category(txns),
        spending_trends=spending_trends(txns),
    )
