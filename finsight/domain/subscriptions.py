"""Recurring payment detection over a user's expense history"""

import re
from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Protocol

from finsight.domain.models import DetectedSubscription, TransactionType
from finsight.utils.date_utils import whole_days_between
from finsight.utils.money import round_money

MIN_GAP_DAYS = 25
MAX_GAP_DAYS = 35
MIN_QUALIFYING_GAPS = 2
BILLING_CYCLE_DAYS = 30

_NON_ALNUM = re.compile(r"[^a-z0-9]")


class ExpenseLike(Protocol):
    amount: Decimal
    type: str
    description: Optional[str]
    transaction_date: datetime


def normalize_merchant(description: Optional[str]) -> str:
    """Grouping key: lowercase, alphanumerics only"""
    if description is None:
        return ""
    return _NON_ALNUM.sub("", description.lower()).strip()


def next_due_date(last_paid: date) -> date:
    return last_paid + timedelta(days=BILLING_CYCLE_DAYS)


def count_qualifying_gaps(ordered: List[ExpenseLike]) -> int:
    """Adjacent pairs whose gap in complete 24-hour days is within [25, 35]"""
    count = 0
    for previous, current in zip(ordered, ordered[1:]):
        gap = whole_days_between(previous.transaction_date, current.transaction_date)
        if MIN_GAP_DAYS <= gap <= MAX_GAP_DAYS:
            count += 1
    return count


def group_by_merchant(transactions: Iterable[ExpenseLike]) -> Dict[str, List[ExpenseLike]]:
    groups: Dict[str, List[ExpenseLike]] = defaultdict(list)
    for txn in transactions:
        if txn.type != TransactionType.EXPENSE.value or txn.description is None:
            continue
        groups[normalize_merchant(txn.description)].append(txn)
    return groups


def detect_subscriptions(transactions: Iterable[ExpenseLike]) -> List[DetectedSubscription]:
    """
    Find merchants charged on a roughly monthly cycle.

    A merchant qualifies when at least two adjacent payments (sorted by
    instant) are 25-35 days apart. The display name comes from the most
    recent payment; the amount is the half-up rounded mean of all payments.
    Results are ordered by merchant key so repeated runs are stable.
    """
    detected = []

    for key, txns in sorted(group_by_merchant(transactions).items()):
        if len(txns) < 2:
            continue

        ordered = sorted(txns, key=lambda t: t.transaction_date)
        if count_qualifying_gaps(ordered) < MIN_QUALIFYING_GAPS:
            continue

        latest = ordered[-1]
        total = sum((Decimal(t.amount) for t in ordered), Decimal("0"))
        last_paid = latest.transaction_date.date()

        detected.append(
            DetectedSubscription(
                merchant_key=key,
                merchant=latest.description,
                avg_amount=round_money(total / len(ordered)),
                last_paid_date=last_paid,
                next_due_date=next_due_date(last_paid),
            )
        )

    return detected
