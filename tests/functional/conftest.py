"""Functional test bootstrap.

Each test gets its own file-backed SQLite database so the application under
test (served through FastAPI's TestClient) and the test's own session use
separate connections, as they would against a real server. The harness's
default engine is pointed at the same file so detached records reload from it.
"""

from __future__ import annotations

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from recordcheck.db.base import get_engine, get_sessionmaker
from recordcheck.logging_setup import configure_logging
from recordcheck.logic.repository_memory import MemoryStore

from users_app import Base, User, create_app


@pytest.fixture(scope="session", autouse=True)
def harness_logging() -> Iterator[None]:
    configure_logging("DEBUG")
    yield


@pytest.fixture()
def engine(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'records.db'}"
    monkeypatch.setenv("TEST_DATABASE_URL", url)
    eng = get_engine(url)
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)


@pytest.fixture()
def session(engine):
    SessionLocal = get_sessionmaker(engine)
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def client(engine):
    with TestClient(create_app(engine)) as c:
        yield c


@pytest.fixture()
def make_user(session):
    def _make(**attributes) -> User:
        user = User(**attributes)
        session.add(user)
        session.commit()
        return user

    return _make


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()
