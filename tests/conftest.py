"""
Shared fixtures: a fresh in-memory SQLite database per test and a TestClient
whose sessions point at it.
"""
import os
from datetime import date

# Must be set before users_api.database builds its engine.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PASSWORD_HASH_ITERATIONS"] = "1000"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from users_api.database import get_session
from users_api.main import app
from users_api.models import user as user_models  # noqa: F401
from users_api.repositories.user_repository import UserRepository
from users_api.services.user_service import UserService


def years_ago(years: int, days: int = 0) -> date:
    today = date.today()
    try:
        anniversary = today.replace(year=today.year - years)
    except ValueError:
        # 29 February in a non-leap target year
        anniversary = today.replace(year=today.year - years, day=28)
    return date.fromordinal(anniversary.toordinal() - days)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def service(session):
    return UserService(UserRepository(session))


@pytest.fixture
def client(engine):
    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def user_payload():
    return {
        "name": "Ana Silva",
        "email": "ana@mail.com",
        "password": "Abc123",
        "birthDate": years_ago(19).isoformat(),
    }
