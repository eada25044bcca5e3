"""Dashboard summary for a user and optional date window"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from finsight.domain.dashboard import build_summary
from finsight.domain.exceptions import InvalidRequestError, NotFoundError
from finsight.domain.models import DashboardSummary
from finsight.infrastructure.database.repositories import TransactionRepository, UserRepository
from finsight.utils.date_utils import day_bounds


class DashboardService:
    def __init__(self, db: Session):
        self.users = UserRepository(db)
        self.transactions = TransactionRepository(db)

    def get_summary(
        self, user_id: int, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> DashboardSummary:
        """Both boundary dates are included: [start 00:00:00, end 23:59:59]"""
        if start_date and end_date and start_date > end_date:
            raise InvalidRequestError("startDate must not be after endDate")
        if self.users.get_by_id(user_id) is None:
            raise NotFoundError("User", user_id)

        start, end = day_bounds(start_date, end_date)
        return build_summary(self.transactions.get_by_user_between(user_id, start, end))
