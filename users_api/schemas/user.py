from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for wire DTOs: snake_case in Python, camelCase in JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# Incoming fields are all optional here: missing values are reported by the
# rule sets in core.validation as 400 messages instead of parse errors.
class UserCreate(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    birth_date: Optional[date] = None
    phone: Optional[str] = None


class UserUpdate(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    birth_date: Optional[date] = None
    phone: Optional[str] = None
    # None keeps the current flag
    active: Optional[bool] = None


class UserView(CamelModel):
    id: int
    name: str
    email: str
    birth_date: date
    phone: Optional[str] = None
    active: bool
    created_at: datetime


class EmailAvailability(CamelModel):
    email: str
    exists: bool


class ValidationErrorResponse(BaseModel):
    errors: List[str]


class MessageResponse(BaseModel):
    message: str
