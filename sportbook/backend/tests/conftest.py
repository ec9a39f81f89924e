from datetime import datetime, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sportbook.api import deps
from sportbook.api.errors import register_error_handlers
from sportbook.core.context import RequestContext
from sportbook.core.errors import UnauthorizedError
from sportbook.db.session import Base, get_db
from sportbook.db import models  # noqa: F401

from factories import FrozenClock


@pytest.fixture()
def db_session():
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    TestingSessionLocal = sessionmaker(
        bind=engine, autoflush=False, autocommit=False, expire_on_commit=False
    )
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def clock():
    return FrozenClock(datetime(2030, 6, 1, 8, 0, tzinfo=timezone.utc))


class Identity:
    """Mutable stand-in for the bearer-token lookup in API tests."""

    def __init__(self) -> None:
        self.ctx = None

    def act_as(self, user) -> None:
        self.ctx = RequestContext(user_id=user.id, is_admin=user.is_admin)

    def __call__(self) -> RequestContext:
        if self.ctx is None:
            raise UnauthorizedError("Not authenticated")
        return self.ctx


@pytest.fixture()
def api_client(clock):
    """Bare FastAPI app with the given routers over an in-memory database."""
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    TestingSessionLocal = sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    identity = Identity()
    apps = []

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    def build(*routers, fake_identity=True):
        test_app = FastAPI()
        register_error_handlers(test_app)
        for router in routers:
            test_app.include_router(router, prefix="/api/v1")
        test_app.dependency_overrides[get_db] = override_get_db
        test_app.dependency_overrides[deps.get_clock] = lambda: clock
        if fake_identity:
            test_app.dependency_overrides[deps.get_request_context] = identity
        apps.append(test_app)
        return TestClient(test_app), TestingSessionLocal, identity

    yield build

    for test_app in apps:
        test_app.dependency_overrides.clear()
    engine.dispose()
