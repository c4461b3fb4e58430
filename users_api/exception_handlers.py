import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.errors import (
    EmailConflictError,
    OperationCancelled,
    UserNotFoundError,
    ValidationFailure,
)
from .schemas.user import MessageResponse, ValidationErrorResponse

logger = logging.getLogger(__name__)


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=MessageResponse(message=message).model_dump(),
    )


def _errors(errors) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ValidationErrorResponse(errors=errors).model_dump(),
    )


async def validation_failure_handler(request: Request, exc: ValidationFailure):
    logger.info(f"{request.method} {request.url.path} | rejected | {exc.errors}")
    return _errors(exc.errors)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Malformed JSON, non-integer ids or unparsable dates.
    errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        errors.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    logger.info(f"{request.method} {request.url.path} | invalid payload | {errors}")
    return _errors(errors)


async def not_found_handler(request: Request, exc: UserNotFoundError):
    logger.info(f"{request.method} {request.url.path} | {exc}")
    return _message(status.HTTP_404_NOT_FOUND, str(exc))


async def conflict_handler(request: Request, exc: EmailConflictError):
    logger.info(f"{request.method} {request.url.path} | {exc}")
    return _message(status.HTTP_409_CONFLICT, str(exc))


async def cancelled_handler(request: Request, exc: OperationCancelled):
    logger.warning(f"{request.method} {request.url.path} | {exc}")
    return _message(status.HTTP_503_SERVICE_UNAVAILABLE, "Request cancelled")


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(f"{request.method} {request.url.path} | {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content=MessageResponse(message=str(exc.detail)).model_dump(),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return _message(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
