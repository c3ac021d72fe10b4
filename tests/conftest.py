# ruff: noqa: E402
import os
from typing import Any

import pytest
from sqlalchemy.orm import sessionmaker

# Set testing environment flags before importing the app or settings
os.environ["APP_ENV"] = "test"
os.environ["DISABLE_EXTERNAL_NOTIFICATIONS"] = "1"
os.environ["REDIS_URL"] = ""
os.environ["DATABASE_URL"] = "sqlite:///./tests/test.db"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./tests/test.db"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ENCRYPT_KEY"] = "0123456789abcdef" * 4
os.environ["SITE_URL"] = "https://photos.example.com"

from tests.testclient import TestClient

import gallery_notifications.models  # noqa: F401 - registers every table
from gallery_notifications.core.cache.redis_cache import cache_manager
from gallery_notifications.core.config import settings
from gallery_notifications.core.database import Base, engine, get_db
from gallery_notifications.main import app
from gallery_notifications.modules.comments.invalidation import get_cache_invalidator
from gallery_notifications.modules.notifications.common import email_type_cache
from gallery_notifications.modules.notifications.email import get_email_dispatcher
from gallery_notifications.oauth2 import create_access_token
from tests import factories
from tests.fakes import RecordingDispatcher, SpyInvalidator


class AttrDict(dict):
    """Dict with attribute-style access for fixtures."""

    def __getattr__(self, item: str) -> Any:
        try:
            return self[item]
        except KeyError as exc:
            raise AttributeError(item) from exc


# Align settings with the test environment even if loaded before env vars
object.__setattr__(settings, "environment", "test")

Base.metadata.drop_all(bind=engine)
Base.metadata.create_all(bind=engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def session():
    """Fresh database session over emptied tables for every test."""
    with engine.begin() as connection:
        for table in reversed(Base.metadata.sorted_tables):
            connection.execute(table.delete())
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def mailer():
    return RecordingDispatcher()


@pytest.fixture(scope="function")
def invalidator():
    return SpyInvalidator()


@pytest.fixture(scope="function")
def client(session, mailer, invalidator):
    def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_dispatcher] = lambda: mailer
    app.dependency_overrides[get_cache_invalidator] = lambda: invalidator
    with TestClient(app) as test_client:
        try:
            yield test_client
        finally:
            app.dependency_overrides.clear()


@pytest.fixture(autouse=True, scope="function")
def _reset_shared_state():
    """Reset Redis and email-type caches between tests to avoid cross-test leakage."""
    object.__setattr__(settings, "REDIS_URL", "")
    cache_manager.redis = None
    cache_manager.enabled = False
    cache_manager.failed_init = False
    email_type_cache.clear()
    yield
    email_type_cache.clear()


@pytest.fixture(scope="function")
def email_types(session):
    return AttrDict(factories.seed_email_types(session))


@pytest.fixture(scope="function")
def member(session):
    return factories.make_profile(session, full_name="Casey Commenter", nickname="casey")


@pytest.fixture(scope="function")
def owner(session):
    return factories.make_profile(session, full_name="Olive Owner", nickname="olive")


@pytest.fixture(scope="function")
def token(member):
    return create_access_token({"user_id": member.id})


@pytest.fixture(scope="function")
def authorized_client(client, token):
    client.headers.update({"Authorization": f"Bearer {token}"})
    return client
