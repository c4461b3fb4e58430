import logging

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel, Session, create_engine

from .config import settings


logger = logging.getLogger(__name__)


def _sqlite_pragmas(dbapi_connection, connection_record) -> None:
    # NullPool opens a new connection per session, so the pragmas go on every one.
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA journal_mode=WAL;")
        cursor.execute("PRAGMA busy_timeout=60000;")
    finally:
        cursor.close()


def build_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite"):
        sqlite_engine = create_engine(
            database_url,
            echo=settings.sql_echo,
            connect_args={"check_same_thread": False, "timeout": 60},
            poolclass=NullPool,  # one writer at a time, no pooled connection holds the lock
        )
        event.listen(sqlite_engine, "connect", _sqlite_pragmas)
        return sqlite_engine

    return create_engine(
        database_url,
        echo=settings.sql_echo,
        pool_pre_ping=True,
    )


engine = build_engine(settings.database_url)


def get_session():
    # Anything not committed when the request ends is rolled back on close.
    with Session(engine) as session:
        yield session


def init_db():
    from .models import user  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("Database tables verified/created.")
