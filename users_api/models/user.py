from datetime import date, datetime, timezone
from typing import Optional

from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    __tablename__ = "users"
    # ids are never handed out twice, even after the highest row goes away
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)

    name: str = Field(max_length=100)
    email: str = Field(max_length=255, index=True, unique=True)
    password_hash: str
    birth_date: date
    phone: Optional[str] = Field(default=None, max_length=20)

    # soft delete: False means the user was removed
    active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = Field(default=None)
