"""User registration and login"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from finsight.domain.exceptions import ConflictError, UnauthorizedError
from finsight.infrastructure.database.models import UserRecord
from finsight.infrastructure.database.repositories import UserRepository
from finsight.infrastructure.security.passwords import hash_password, issue_token, verify_password


@dataclass
class LoginResult:
    token: str
    user: UserRecord
    demo_seeded: bool = False


class AccountService:
    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)

    def register(self, username: str, email: str, password: str, full_name: Optional[str]) -> UserRecord:
        if self.users.get_by_username(username) is not None:
            raise ConflictError("Username already taken")
        if self.users.get_by_email(email) is not None:
            raise ConflictError("Email already registered")

        try:
            user = self.users.create_user(
                username=username,
                email=email,
                full_name=full_name,
                password_hash=hash_password(password),
                created_at=datetime.now(),
            )
            self.db.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent registration
            self.db.rollback()
            raise ConflictError("Username or email already taken") from e
        except Exception:
            self.db.rollback()
            raise

        logging.info("User registered", extra={"user_id": user.id})
        return user

    def login(self, username: str, password: str) -> LoginResult:
        user = self.users.get_by_username(username)
        if user is None or not verify_password(password, user.password_hash):
            raise UnauthorizedError("Invalid username or password")
        return LoginResult(token=issue_token(), user=user)
