"""Integration tests for the data access layer"""

import pytest
from datetime import date, datetime, timedelta
from decimal import Decimal
from finsight.domain.models import DetectedSubscription, SubscriptionStatus, TransactionFilter
from finsight.infrastructure.database.repositories import (
    SubscriptionRepository,
    TransactionRepository,
)

pytestmark = pytest.mark.integration

T0 = datetime(2024, 3, 15, 12, 0, 0)


def test_history_view_over_empty_user(db, user):
    repo = TransactionRepository(db)

    assert repo.average_amount(user.id) is None
    assert repo.count_in_window(user.id, T0 - timedelta(minutes=10), T0) == 0
    assert repo.most_recent(user.id) is None
    assert repo.distinct_categories(user.id) == set()


def test_history_view_aggregates(db, user, other_user, add_transaction):
    add_transaction(amount="50.00", category="groceries", when=T0 - timedelta(days=1))
    add_transaction(amount="150.00", category="travel", location="Paris", when=T0 - timedelta(hours=3))
    add_transaction(amount="999.00", category="salary", type="INCOME", when=T0, user_id=other_user.id)
    repo = TransactionRepository(db)

    assert repo.average_amount(user.id) == Decimal("100")
    assert repo.distinct_categories(user.id) == {"groceries", "travel"}
    assert repo.most_recent(user.id).location == "Paris"
    assert len(repo.get_by_user(user.id)) == 2


def test_count_in_window_is_inclusive(db, user, add_transaction):
    start = T0 - timedelta(minutes=10)
    add_transaction(when=start - timedelta(seconds=1))
    add_transaction(when=start)
    add_transaction(when=T0 - timedelta(minutes=5))
    add_transaction(when=T0)
    add_transaction(when=T0 + timedelta(seconds=1))

    assert TransactionRepository(db).count_in_window(user.id, start, T0) == 3


def test_newest_first_and_fraud_only(db, user, add_transaction):
    old = add_transaction(when=T0 - timedelta(days=2), fraudulent=True, fraud_score=75.0)
    new = add_transaction(when=T0)
    middle = add_transaction(when=T0 - timedelta(days=1), fraudulent=True, fraud_score=90.0)
    repo = TransactionRepository(db)

    assert [t.id for t in repo.get_by_user_newest_first(user.id)] == [new.id, middle.id, old.id]
    assert [t.id for t in repo.get_fraudulent_by_user(user.id)] == [middle.id, old.id]


def test_search_filters_and_paginates(db, user, add_transaction):
    for i in range(5):
        add_transaction(amount=f"{10 + i}.00", category="groceries", when=T0 - timedelta(days=i))
    add_transaction(amount="500.00", category="rent", when=T0)
    add_transaction(amount="900.00", type="INCOME", category="salary", when=T0)
    repo = TransactionRepository(db)

    content, total = repo.search(
        TransactionFilter(user_id=user.id, type="EXPENSE", category="groceries"),
        sort_by="amount",
        descending=False,
        page=1,
        size=2,
    )

    assert total == 5
    assert [t.amount for t in content] == [Decimal("12.00"), Decimal("13.00")]


def test_search_date_range_and_fraud_flag(db, user, add_transaction):
    add_transaction(when=T0 - timedelta(days=10), fraudulent=True)
    inside = add_transaction(when=T0 - timedelta(days=3), fraudulent=True)
    add_transaction(when=T0 - timedelta(days=2), fraudulent=False)

    content, total = TransactionRepository(db).search(
        TransactionFilter(
            user_id=user.id,
            start=T0 - timedelta(days=5),
            end=T0,
            fraudulent=True,
        ),
        sort_by="transactionDate",
        descending=True,
        page=0,
        size=20,
    )

    assert total == 1
    assert [t.id for t in content] == [inside.id]


def test_search_blank_filters_ignored(db, user, add_transaction):
    add_transaction(category="groceries")
    add_transaction(category="rent")

    _, total = TransactionRepository(db).search(
        TransactionFilter(user_id=user.id, type="  ", category=""),
        sort_by="id",
        descending=False,
        page=0,
        size=20,
    )

    assert total == 2


def test_search_ties_broken_by_id(db, user, add_transaction):
    ids = [add_transaction(when=T0).id for _ in range(3)]

    content, _ = TransactionRepository(db).search(
        TransactionFilter(user_id=user.id), sort_by="transactionDate", descending=True, page=0, size=10
    )

    assert [t.id for t in content] == sorted(ids, reverse=True)


def _detected(merchant="Netflix", key="netflix", last=date(2024, 3, 1), amount="15.99"):
    return DetectedSubscription(
        merchant_key=key,
        merchant=merchant,
        avg_amount=Decimal(amount),
        last_paid_date=last,
        next_due_date=last + timedelta(days=30),
    )


def test_save_detected_upserts_by_merchant(db, user):
    repo = SubscriptionRepository(db)

    first = repo.save_detected(user.id, [_detected()], created_at=T0)
    db.commit()
    repo.set_status(first[0], SubscriptionStatus.IGNORED)
    db.commit()

    second = repo.save_detected(
        user.id, [_detected(merchant="NETFLIX", last=date(2024, 3, 31), amount="17.99")], created_at=T0 + timedelta(days=30)
    )
    db.commit()

    rows = repo.find_by_user(user.id)
    assert len(rows) == 1
    assert second[0].id == first[0].id
    assert rows[0].merchant == "NETFLIX"
    assert rows[0].avg_amount == Decimal("17.99")
    assert rows[0].next_due_date == date(2024, 4, 30)
    assert rows[0].status == "IGNORED"
    assert rows[0].created_at == T0


def test_find_due_between_only_active_and_inclusive(db, user):
    repo = SubscriptionRepository(db)
    saved = repo.save_detected(
        user.id,
        [
            _detected("A", "a", last=date(2024, 2, 1)),  # due 2024-03-02
            _detected("B", "b", last=date(2024, 2, 7)),  # due 2024-03-08
            _detected("C", "c", last=date(2024, 2, 8)),  # due 2024-03-09
            _detected("D", "d", last=date(2024, 2, 3)),  # due 2024-03-04, ignored
        ],
        created_at=T0,
    )
    repo.set_status(saved[3], SubscriptionStatus.IGNORED)
    db.commit()

    due = repo.find_due_between(user.id, date(2024, 3, 2), date(2024, 3, 8))

    assert [s.merchant for s in due] == ["A", "B"]
    assert [s.merchant for s in repo.find_by_user(user.id, status="IGNORED")] == ["D"]
