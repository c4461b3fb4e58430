import threading
from typing import List

from fastapi import APIRouter, Depends, Query, Response, status

from ..core.errors import UserNotFoundError, ValidationFailure
from ..core.validation import normalize_email, validate_create, validate_update
from ..dependencies import get_cancel_event, get_user_service
from ..schemas.user import (
    EmailAvailability,
    MessageResponse,
    UserCreate,
    UserUpdate,
    UserView,
    ValidationErrorResponse,
)
from ..services.user_service import UserService


router = APIRouter(
    prefix="/users",
    tags=["users"],
)

_NOT_FOUND = {status.HTTP_404_NOT_FOUND: {"model": MessageResponse}}
_BAD_REQUEST = {status.HTTP_400_BAD_REQUEST: {"model": ValidationErrorResponse}}
_CONFLICT = {status.HTTP_409_CONFLICT: {"model": MessageResponse}}


# ─────────────────────────────
#   ENDPOINTS
# ─────────────────────────────

@router.get(
    "",
    response_model=List[UserView],
    status_code=status.HTTP_200_OK,
)
def list_users(
    service: UserService = Depends(get_user_service),
    cancel: threading.Event = Depends(get_cancel_event),
):
    """All users, inactive ones included."""
    return service.list_users(cancel=cancel)


@router.get(
    "/email-exists",
    response_model=EmailAvailability,
    status_code=status.HTTP_200_OK,
)
def email_exists(
    email: str = Query(min_length=1),
    service: UserService = Depends(get_user_service),
    cancel: threading.Event = Depends(get_cancel_event),
):
    email_norm = normalize_email(email)
    return EmailAvailability(email=email_norm, exists=service.email_exists(email_norm, cancel=cancel))


@router.get(
    "/{user_id}",
    response_model=UserView,
    status_code=status.HTTP_200_OK,
    responses=_NOT_FOUND,
)
def get_user(
    user_id: int,
    service: UserService = Depends(get_user_service),
    cancel: threading.Event = Depends(get_cancel_event),
):
    user = service.get_user(user_id, cancel=cancel)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


@router.post(
    "",
    response_model=UserView,
    status_code=status.HTTP_201_CREATED,
    responses={**_BAD_REQUEST, **_CONFLICT},
)
def create_user(
    payload: UserCreate,
    response: Response,
    service: UserService = Depends(get_user_service),
    cancel: threading.Event = Depends(get_cancel_event),
):
    """
    Create an active user.

    - The email is trimmed and lowercased before validation and the uniqueness check.
    - Only the password hash is stored.
    """
    payload = payload.model_copy(update={"email": normalize_email(payload.email)})
    errors = validate_create(payload)
    if errors:
        raise ValidationFailure(errors)

    user = service.create_user(payload, cancel=cancel)
    response.headers["Location"] = f"{router.prefix}/{user.id}"
    return user


@router.put(
    "/{user_id}",
    response_model=UserView,
    status_code=status.HTTP_200_OK,
    responses={**_BAD_REQUEST, **_NOT_FOUND, **_CONFLICT},
)
def update_user(
    user_id: int,
    payload: UserUpdate,
    service: UserService = Depends(get_user_service),
    cancel: threading.Event = Depends(get_cancel_event),
):
    payload = payload.model_copy(update={"email": normalize_email(payload.email)})
    errors = validate_update(payload)
    if errors:
        raise ValidationFailure(errors)

    return service.update_user(user_id, payload, cancel=cancel)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_NOT_FOUND,
)
def delete_user(
    user_id: int,
    service: UserService = Depends(get_user_service),
    cancel: threading.Event = Depends(get_cancel_event),
):
    """Soft delete: the row stays, flagged active=false, and can still be fetched."""
    if not service.delete_user(user_id, cancel=cancel):
        raise UserNotFoundError(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
