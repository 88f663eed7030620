"""User registration and session resolution."""

from __future__ import annotations

import logging
from typing import Optional

from cricfantasy.errors import ForbiddenError, NotFoundError, UnauthorizedError, ValidationFailedError
from cricfantasy.persistence import FantasyStore, UserRecord


logger = logging.getLogger("uvicorn.error")


class AccountService:
    def __init__(self, store: FantasyStore):
        self.store = store

    def register(self, *, username: str, email: str, full_name: str) -> UserRecord:
        if self.store.get_user_by_username(username) is not None:
            raise ValidationFailedError("Username already exists")
        if self.store.get_user_by_email(email) is not None:
            raise ValidationFailedError("Email already registered")
        user = self.store.create_user(username=username, email=email, full_name=full_name)
        logger.info("Registered user %s (%s)", user.id, username)
        return user

    def authenticate(self, user_id: Optional[int]) -> UserRecord:
        """Resolve the session user, rejecting anonymous or unknown callers."""

        if user_id is None:
            raise UnauthorizedError("Unauthorized")
        user = self.store.get_user(user_id)
        if user is None:
            raise UnauthorizedError("Unauthorized")
        return user

    def wallet(self, *, requesting_user_id: int, user_id: int) -> UserRecord:
        if requesting_user_id != user_id:
            raise ForbiddenError("Forbidden")
        user = self.store.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user
