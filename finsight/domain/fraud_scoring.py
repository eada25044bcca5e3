"""Fraud scoring engine - deterministic rule-based risk assessment"""

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Iterable, List, Optional, Protocol, Tuple

from finsight.domain.models import FraudAssessment, RiskLevel, TransactionCandidate
from finsight.utils.date_utils import whole_hours_between

HIGH_AMOUNT_MULTIPLIER = Decimal(3)
RAPID_FIRE_WINDOW = timedelta(minutes=10)
RAPID_FIRE_MIN_COUNT = 5
LOCATION_WINDOW_HOURS = 2

FRAUD_THRESHOLD = 70.0
MEDIUM_RISK_THRESHOLD = 40.0


class PriorTransaction(Protocol):
    location: Optional[str]
    transaction_date: datetime


class TransactionHistory(Protocol):
    """Read-only view of a user's previously stored transactions"""

    def average_amount(self, user_id: int) -> Optional[Decimal]: ...

    def count_in_window(self, user_id: int, start: datetime, end: datetime) -> int: ...

    def most_recent(self, user_id: int) -> Optional[PriorTransaction]: ...

    def distinct_categories(self, user_id: int) -> Iterable[str]: ...


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def has_high_amount_anomaly(candidate: TransactionCandidate, history: TransactionHistory) -> bool:
    """Rule 1: amount strictly above 3x the user's average amount"""
    average = history.average_amount(candidate.user_id)
    if average is None or average <= 0:
        return False
    return candidate.amount > average * HIGH_AMOUNT_MULTIPLIER


def has_rapid_fire_activity(candidate: TransactionCandidate, history: TransactionHistory) -> bool:
    """Rule 2: 5+ transactions in the 10 minutes up to and including the candidate's instant"""
    window_start = candidate.transaction_date - RAPID_FIRE_WINDOW
    count = history.count_in_window(candidate.user_id, window_start, candidate.transaction_date)
    return count >= RAPID_FIRE_MIN_COUNT


def has_location_anomaly(candidate: TransactionCandidate, history: TransactionHistory) -> bool:
    """
    Rule 3: a different location than the most recent transaction, less than 2 hours apart.

    Hours are whole hours (truncated), so 1h59m counts as 1 and fires while
    exactly 2h does not. A blank location on either side disables the rule.
    """
    if _is_blank(candidate.location):
        return False

    last = history.most_recent(candidate.user_id)
    if last is None or _is_blank(last.location):
        return False

    hours = whole_hours_between(last.transaction_date, candidate.transaction_date)
    return hours < LOCATION_WINDOW_HOURS and candidate.location.lower() != last.location.lower()


def is_new_category(candidate: TransactionCandidate, history: TransactionHistory) -> bool:
    """Rule 4: category never used by this user before"""
    if not candidate.category:
        return False
    return candidate.category not in set(history.distinct_categories(candidate.user_id))


RuleCheck = Callable[[TransactionCandidate, TransactionHistory], bool]

# (check, points, reason) evaluated in this order
RULES: List[Tuple[RuleCheck, float, str]] = [
    (has_high_amount_anomaly, 30.0, "Amount exceeds 3x user average"),
    (has_rapid_fire_activity, 25.0, "5+ transactions in 10 minutes"),
    (has_location_anomaly, 25.0, "Different location within 2 hours"),
    (is_new_category, 20.0, "New category for user"),
]


def determine_risk_level(score: float) -> RiskLevel:
    """
    Map fraud score to risk tier.

    - 0 - 39:  LOW
    - 40 - 69: MEDIUM
    - 70+:     HIGH
    """
    if score >= FRAUD_THRESHOLD:
        return RiskLevel.HIGH
    elif score >= MEDIUM_RISK_THRESHOLD:
        return RiskLevel.MEDIUM
    else:
        return RiskLevel.LOW


def _rule_fires(check: RuleCheck, candidate: TransactionCandidate, history: TransactionHistory) -> bool:
    try:
        return check(candidate, history)
    except Exception as e:
        logging.warning(
            f"Fraud rule {check.__name__} could not be evaluated: {e}",
            extra={"user_id": candidate.user_id, "step": "fraud_rule_skipped", "rule": check.__name__},
        )
        return False


def score_transaction(candidate: TransactionCandidate, history: TransactionHistory) -> FraudAssessment:
    """
    Main entry point: evaluate every rule against the user's history.

    Rules are additive and independent; a rule whose data lookup fails
    contributes 0 and the others still run. The history is only read.
    """
    score = 0.0
    reasons: List[str] = []

    for check, points, reason in RULES:
        if _rule_fires(check, candidate, history):
            score += points
            reasons.append(reason)

    return FraudAssessment(
        score=score,
        risk_level=determine_risk_level(score),
        fraudulent=score >= FRAUD_THRESHOLD,
        reasons=reasons,
    )


def build_alert_message(reasons: List[str], max_length: int = 255) -> str:
    """Human-readable alert text, cut to max_length with a trailing ellipsis"""
    message = "Fraud detected: " + ", ".join(reasons)
    if len(message) > max_length:
        message = message[: max_length - 3] + "..."
    return message
