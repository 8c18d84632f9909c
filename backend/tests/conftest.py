"""Shared test fixtures."""
import os

# settings are cached on first import
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = ""
os.environ["HOLIDAYS_STRICT"] = "false"

from datetime import date, datetime

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from studio.database import get_db
from studio.dependencies import get_calendar, get_reference_now
from studio.main import app
from studio.models import Base
from studio.redis_client import get_availability_store
from studio.services.calendar import DEFAULT_HOLIDAYS, HolidayCalendar
from studio.services.slots import AvailabilityRedisStore

# Monday 9 March 2026, 09:00 studio time
FIXED_NOW = datetime(2026, 3, 9, 9, 0)


@pytest.fixture
def calendar() -> HolidayCalendar:
    return HolidayCalendar(DEFAULT_HOLIDAYS)


@pytest.fixture
def today() -> date:
    return FIXED_NOW.date()


@pytest.fixture
def redis_conn():
    conn = fakeredis.FakeRedis(decode_responses=True)
    yield conn
    conn.flushall()


@pytest.fixture
def store(redis_conn) -> AvailabilityRedisStore:
    return AvailabilityRedisStore(redis_conn)


@pytest.fixture
def db_session():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _fk_on(dbapi_connection, _):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def client(db_session, calendar):
    """API client with the session, clock and calendar pinned; cache disabled."""
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_reference_now] = lambda: FIXED_NOW
    app.dependency_overrides[get_calendar] = lambda: calendar
    app.dependency_overrides[get_availability_store] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def cached_client(client, store):
    """Same as `client` but with a fakeredis-backed availability cache."""
    app.dependency_overrides[get_availability_store] = lambda: store
    return client
