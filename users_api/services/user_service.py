"""
User Service

Business rules for user management: email uniqueness, existence checks,
password hashing and the soft delete. Every write ends in at most one commit.
"""
import logging
import threading
from typing import List, Optional

from ..core.errors import EmailConflictError, OperationCancelled, UserNotFoundError
from ..core.security import hash_password
from ..core.validation import normalize_email
from ..models.user import User, utcnow
from ..repositories.user_repository import UserRepository
from ..schemas.user import UserCreate, UserUpdate, UserView

logger = logging.getLogger(__name__)


def to_view(user: User) -> UserView:
    return UserView.model_validate(user)


class UserService:
    """Service for user business logic."""

    def __init__(self, repository: UserRepository):
        self.repository = repository

    def _check_cancelled(self, operation: str, cancel: Optional[threading.Event]) -> None:
        if cancel is not None and cancel.is_set():
            self.repository.rollback()
            logger.info(f"[UserService.{operation}] cancelled, nothing committed")
            raise OperationCancelled(operation)

    def _commit(self, operation: str, user: User, cancel: Optional[threading.Event]) -> None:
        self._check_cancelled(operation, cancel)
        self.repository.save_changes(user)

    def list_users(self, cancel: Optional[threading.Event] = None) -> List[UserView]:
        """Every user, inactive ones included, ordered by id."""
        self._check_cancelled("list_users", cancel)
        return [to_view(user) for user in self.repository.get_all()]

    def get_user(self, user_id: int, cancel: Optional[threading.Event] = None) -> Optional[UserView]:
        self._check_cancelled("get_user", cancel)
        user = self.repository.get_by_id(user_id)
        if user is None:
            return None
        return to_view(user)

    def email_exists(self, email: str, cancel: Optional[threading.Event] = None) -> bool:
        self._check_cancelled("email_exists", cancel)
        return self.repository.email_exists(normalize_email(email))

    def create_user(self, data: UserCreate, cancel: Optional[threading.Event] = None) -> UserView:
        """
        Create an active user.

        The email is stored lowercased. The plaintext password is hashed here
        and never stored or returned. Raises EmailConflictError when the email
        is taken by any user.
        """
        email = normalize_email(data.email)
        if self.repository.email_exists(email):
            logger.warning(f"[UserService.create_user] email already registered: {email}")
            raise EmailConflictError(email)

        user = User(
            name=data.name,
            email=email,
            password_hash=hash_password(data.password),
            birth_date=data.birth_date,
            phone=data.phone or None,
            active=True,
            created_at=utcnow(),
        )
        self.repository.add(user)
        self._commit("create_user", user, cancel)

        logger.info(f"[UserService.create_user] created user_id={user.id}")
        return to_view(user)

    def update_user(
        self,
        user_id: int,
        data: UserUpdate,
        cancel: Optional[threading.Event] = None,
    ) -> UserView:
        """Overwrite the editable fields. The password hash is left untouched."""
        user = self.repository.get_by_id(user_id)
        if user is None:
            logger.warning(f"[UserService.update_user] user_id={user_id} not found")
            raise UserNotFoundError(user_id)

        email = normalize_email(data.email)
        if user.email.lower() != email and self.repository.email_exists(email):
            logger.warning(f"[UserService.update_user] email already registered: {email}")
            raise EmailConflictError(email)

        user.name = data.name
        user.email = email
        user.birth_date = data.birth_date
        user.phone = data.phone or None
        if data.active is not None:
            user.active = data.active
        user.updated_at = utcnow()

        self.repository.update(user)
        self._commit("update_user", user, cancel)

        logger.info(f"[UserService.update_user] updated user_id={user_id}")
        return to_view(user)

    def delete_user(self, user_id: int, cancel: Optional[threading.Event] = None) -> bool:
        """Soft delete: flag the row inactive. Returns False when there is no such user."""
        user = self.repository.get_by_id(user_id)
        if user is None:
            return False

        user.active = False
        user.updated_at = utcnow()

        self.repository.update(user)
        self._commit("delete_user", user, cancel)

        logger.info(f"[UserService.delete_user] deactivated user_id={user_id}")
        return True
