"""Bearer token helpers and environment-driven settings."""

import pytest
from jose import jwt

from gallery_notifications.core.config import settings
from gallery_notifications.core.config.environment import ENVIRONMENTS, TestSettings
from gallery_notifications.core.exceptions import InvalidTokenException
from gallery_notifications.oauth2 import create_access_token, verify_access_token


def test_access_token_round_trip():
    token = create_access_token({"user_id": "abc"})
    assert verify_access_token(token) == "abc"


def test_token_without_user_id_is_rejected():
    token = create_access_token({"sub": "abc"})
    with pytest.raises(InvalidTokenException):
        verify_access_token(token)


def test_token_signed_with_another_key_is_rejected():
    token = jwt.encode({"user_id": "abc"}, "other-key", algorithm="HS256")
    with pytest.raises(InvalidTokenException):
        verify_access_token(token)


def test_expired_token_is_rejected():
    token = create_access_token({"user_id": "abc"}, expires_minutes=-1)
    with pytest.raises(InvalidTokenException):
        verify_access_token(token)


def test_test_environment_settings():
    assert isinstance(settings, TestSettings)
    assert ENVIRONMENTS["testing"] is TestSettings
    assert settings.site_url == "https://photos.example.com"
    assert settings.mail_enabled is False
    assert settings.redis_url is None
    assert settings.NOTIFICATION_FANOUT_CONCURRENCY == 5


def test_site_url_strips_trailing_slash(monkeypatch):
    monkeypatch.setattr(settings, "SITE_URL", "https://photos.example.com/")
    assert settings.site_url == "https://photos.example.com"


def test_mail_enabled_needs_credentials(monkeypatch):
    monkeypatch.setattr(settings, "environment", "production")
    monkeypatch.delenv("DISABLE_EXTERNAL_NOTIFICATIONS", raising=False)
    monkeypatch.setattr(settings, "mail_username", None)
    assert settings.mail_enabled is False

    monkeypatch.setattr(settings, "mail_username", "mailer")
    monkeypatch.setattr(settings, "mail_password", "secret")
    monkeypatch.setattr(settings, "mail_server", "smtp.example.com")
    assert settings.mail_enabled is True

    monkeypatch.setenv("DISABLE_EXTERNAL_NOTIFICATIONS", "1")
    assert settings.mail_enabled is False


def test_test_database_url_refuses_non_test_postgres(monkeypatch):
    monkeypatch.setattr(settings, "test_database_url", "postgresql://u:p@localhost/photos")
    with pytest.raises(ValueError):
        settings.get_database_url(use_test=True)

    monkeypatch.setattr(settings, "test_database_url", "postgresql://u:p@localhost/photos_test")
    assert settings.get_database_url(use_test=True).endswith("photos_test")


def _request(headers=None):
    from starlette.requests import Request

    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({"type": "http", "headers": raw, "client": ("203.0.113.9", 5000)})


def test_comment_throttle_keys_by_token_then_address():
    from gallery_notifications.core.middleware.rate_limit import caller_key

    a = caller_key(_request({"Authorization": "Bearer aaa"}))
    b = caller_key(_request({"Authorization": "Bearer bbb"}))

    assert a.startswith("token:") and a != b
    assert "aaa" not in a
    assert caller_key(_request()) == "ip:203.0.113.9"
    assert caller_key(_request({"Authorization": "Basic xyz"})) == "ip:203.0.113.9"


def test_limiter_is_disabled_under_test():
    from gallery_notifications.core.middleware.rate_limit import limiter

    assert limiter.enabled is False


def test_development_settings_relax_comment_throttle(monkeypatch):
    from gallery_notifications.core.config.environment import DevelopmentSettings

    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("COMMENT_RATE_LIMIT", raising=False)
    dev = DevelopmentSettings()

    assert dev.environment == "development"
    assert dev.use_json_logs is False
