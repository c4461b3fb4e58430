"""
User Repository

Data access for the users table. Writes are staged on the session and only
reach the store on save_changes().
"""
import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..core.errors import EmailConflictError
from ..models.user import User

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for user data access."""

    def __init__(self, session: Session):
        self.session = session

    def get_all(self) -> List[User]:
        return list(self.session.exec(select(User).order_by(User.id)).all())

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.session.get(User, user_id)

    def email_exists(self, email: str) -> bool:
        """Case-insensitive lookup across every user, active or not."""
        stmt = select(User.id).where(func.lower(User.email) == email.strip().lower())
        return self.session.exec(stmt).first() is not None

    def add(self, user: User) -> None:
        self.session.add(user)

    def update(self, user: User) -> None:
        self.session.add(user)

    def rollback(self) -> None:
        self.session.rollback()

    def save_changes(self, user: Optional[User] = None) -> None:
        """Commit the pending changes; the unique email index is the final guard."""
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            email = user.email if user is not None else ""
            logger.warning(f"Unique constraint rejected email {email!r}: {e.orig}")
            raise EmailConflictError(email) from e
        except Exception:
            self.session.rollback()
            raise
        if user is not None:
            self.session.refresh(user)
