"""
Pytest configuration and fixtures

All tests run against a private in-memory SQLite database. The schema is
created before and dropped after every test, so nothing leaks between tests.
"""
import os
import sys

import pytest

# Must be set before core.config / core.database are imported anywhere.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_FORMAT", "text")

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from fastapi.testclient import TestClient  # noqa: E402

from core.database import Base, SessionLocal, engine, get_db  # noqa: E402
import models  # noqa: E402,F401
from fixtures.ride_fixtures import make_ride_create  # noqa: E402


@pytest.fixture(scope="function")
def db_session():
    """
    Fresh schema and session per test.

    The engine shares one in-memory connection, so dropping the tables at
    teardown wipes everything the test created.
    """
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """TestClient whose requests use the test's session."""
    from main import app

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def create_ride(db_session):
    """Factory: persist a ride through the store and return it."""
    from services.ride_store import create_ride as store_create_ride

    def _create(**overrides):
        return store_create_ride(db_session, make_ride_create(**overrides))

    return _create
