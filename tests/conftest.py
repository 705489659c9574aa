# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DELETION_TOKEN_PEPPER", "test-pepper")
os.environ.setdefault("HOUSEKEEPING_INTERVAL_SECONDS", "0")

from delerium_paste.core.settings import Settings
from delerium_paste.db.session import Base
from delerium_paste.db.session import get_db as app_get_session
from delerium_paste.main import create_app
from delerium_paste.repositories.paste_repo import PasteRepository
from delerium_paste.schemas.paste import PasteMeta

TEST_DB_URL = "sqlite://"
TEST_PEPPER = "test-pepper"
START_TIME = 1_700_000_000.0

# 17 bytes of ciphertext and a 12 byte IV, base64url without padding.
SAMPLE_CT = "c2VjcmV0LWNpcGhlcnRleHQ"
SAMPLE_IV = "AAECAwQFBgcICQoL"


class FakeClock:
    """Manually advanced replacement for ``time.time``/``time.monotonic``."""

    def __init__(self, start: float = START_TIME) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def repo(db_session: Session, clock: FakeClock) -> PasteRepository:
    return PasteRepository(db_session, TEST_PEPPER, clock=clock)


def make_meta(expire_in: int = 3600, now: float = START_TIME, **kwargs: Any) -> PasteMeta:
    """Build paste metadata expiring ``expire_in`` seconds after ``now``."""
    return PasteMeta(expire_ts=int(now) + expire_in, **kwargs)


def make_settings(**overrides: Any) -> Settings:
    """Settings for app tests: no PoW, no rate limiting, no background work."""
    values: dict[str, Any] = {
        "DATABASE_URL": TEST_DB_URL,
        "DELETION_TOKEN_PEPPER": TEST_PEPPER,
        "POW_ENABLED": False,
        "RATE_LIMIT_ENABLED": False,
        "AUTO_CREATE_TABLES": False,
        "HOUSEKEEPING_INTERVAL_SECONDS": 0,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture()
def make_client(
    session_factory: sessionmaker[Session],
) -> Iterator[Callable[..., TestClient]]:
    """Return a factory building a test client for an app with custom settings."""
    clients: list[TestClient] = []

    def _get_session_override() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    def _make(**overrides: Any) -> TestClient:
        app: FastAPI = create_app(make_settings(**overrides))
        app.dependency_overrides[app_get_session] = _get_session_override
        test_client = TestClient(app, base_url="http://test")
        test_client.__enter__()
        clients.append(test_client)
        return test_client

    try:
        yield _make
    finally:
        for test_client in clients:
            test_client.__exit__(None, None, None)


@pytest.fixture()
def client(make_client: Callable[..., TestClient]) -> TestClient:
    return make_client()
