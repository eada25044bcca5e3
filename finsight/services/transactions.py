"""Read paths over a user's transactions"""

from typing import List, Optional

from sqlalchemy.orm import Session

from finsight.config import settings
from finsight.domain.exceptions import InvalidRequestError, NotFoundError
from finsight.domain.models import Page, TransactionFilter
from finsight.infrastructure.database.models import TransactionRecord
from finsight.infrastructure.database.repositories import TransactionRepository, UserRepository

DEFAULT_SORT_FIELD = "transactionDate"


class TransactionQueryService:
    def __init__(self, db: Session):
        self.users = UserRepository(db)
        self.transactions = TransactionRepository(db)

    def _require_user(self, user_id: int) -> None:
        if self.users.get_by_id(user_id) is None:
            raise NotFoundError("User", user_id)

    def list_for_user(self, user_id: int) -> List[TransactionRecord]:
        """All of a user's transactions, newest first"""
        self._require_user(user_id)
        return self.transactions.get_by_user_newest_first(user_id)

    def list_fraudulent(self, user_id: int) -> List[TransactionRecord]:
        self._require_user(user_id)
        return self.transactions.get_fraudulent_by_user(user_id)

    def search(
        self,
        criteria: TransactionFilter,
        sort_by: str = DEFAULT_SORT_FIELD,
        sort_dir: str = "desc",
        page: int = 0,
        size: Optional[int] = None,
    ) -> Page:
        """
        Filtered and paginated search.

        sort_by accepts the wire (camelCase) or attribute (snake_case) name
        of any transaction field; sort_dir is "asc" or "desc", case-insensitive.
        Page index is zero-based.
        """
        size = settings.default_page_size if size is None else size

        if sort_by not in TransactionRepository.SORTABLE_FIELDS:
            raise InvalidRequestError(f"Cannot sort by '{sort_by}'")
        if sort_dir.lower() not in ("asc", "desc"):
            raise InvalidRequestError("sortDir must be asc or desc")
        if page < 0:
            raise InvalidRequestError("Page index must not be negative")
        if size <= 0 or size > settings.max_page_size:
            raise InvalidRequestError(f"Page size must be between 1 and {settings.max_page_size}")
        if criteria.start and criteria.end and criteria.start > criteria.end:
            raise InvalidRequestError("startDate must not be after endDate")

        self._require_user(criteria.user_id)

        content, total = self.transactions.search(
            criteria,
            sort_by=sort_by,
            descending=sort_dir.lower() == "desc",
            page=page,
            size=size,
        )
        return Page(content=content, page=page, size=size, total_elements=total)
