import asyncio
import logging
import threading

from fastapi import Depends, Request
from sqlmodel import Session

from .database import get_session
from .repositories.user_repository import UserRepository
from .services.user_service import UserService

logger = logging.getLogger(__name__)

DISCONNECT_POLL_SECONDS = 0.05


def get_user_service(session: Session = Depends(get_session)) -> UserService:
    return UserService(UserRepository(session))


async def _watch_disconnect(request: Request, cancel: threading.Event) -> None:
    while not cancel.is_set():
        if await request.is_disconnected():
            logger.info(f"{request.method} {request.url.path} | client disconnected")
            cancel.set()
            return
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


async def get_cancel_event(request: Request):
    """
    One cancellation signal per request.

    A watcher on the event loop sets it when the client goes away; the sync
    handler running in the threadpool checks it before touching the store.
    """
    cancel = threading.Event()
    watcher = asyncio.create_task(_watch_disconnect(request, cancel))
    try:
        yield cancel
    finally:
        watcher.cancel()
