import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings
from .core.errors import (
    EmailConflictError,
    OperationCancelled,
    UserNotFoundError,
    ValidationFailure,
)
from .database import init_db
from .exception_handlers import (
    cancelled_handler,
    conflict_handler,
    http_exception_handler,
    not_found_handler,
    request_validation_handler,
    unhandled_exception_handler,
    validation_failure_handler,
)
from .routers import users as users_router


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = FastAPI(title="Users API", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ValidationFailure, validation_failure_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(UserNotFoundError, not_found_handler)
    app.add_exception_handler(EmailConflictError, conflict_handler)
    app.add_exception_handler(OperationCancelled, cancelled_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.on_event("startup")
    def on_startup():
        init_db()

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(users_router.router)

    return app


app = create_app()
