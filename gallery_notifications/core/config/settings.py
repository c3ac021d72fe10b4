"""Application settings loaded from environment with safe fallbacks.

Environment precedence:
- Loads `.env` from the repo root before reading process env vars.
- Most values are pulled straight from env; booleans go through `_env_flag` so `"0"/"false"` work.
- CORS is normalized from `CORS_ORIGINS` (comma-separated) with a conservative default allowlist.
- Redis is optional: an empty `REDIS_URL` keeps the page cache disabled without failing startup.

Key expectations (defaults in parentheses):
- `APP_ENV` controls settings class selection (`production` default).
- Database: `DATABASE_URL` or component parts (`DATABASE_*`), with `_test` suffix enforced in tests.
- Links: `SITE_URL` is the public origin used for deep links and opt-out links (`http://localhost:3000`).
- Opt-out tokens: `ENCRYPT_KEY` holds 32 bytes as 64 hex characters; missing keys disable opt-out links.
- Auth: `SECRET_KEY` / `ALGORITHM` (`HS256`) sign the bearer tokens of the community site.
- Mail: credentials optional; defaults to empty values in tests/CI; TLS flags removed to avoid dotenv quirks.
- Fan-out: `NOTIFICATION_FANOUT_CONCURRENCY` (5) bounds concurrent email sends per comment.
"""

import json
import logging
import os
from pathlib import Path
from typing import ClassVar, Optional

from dotenv import load_dotenv
from fastapi_mail import ConnectionConfig
from pydantic import ConfigDict, EmailStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# (__file__ is gallery_notifications/core/config/settings.py)
BASE_DIR = Path(__file__).resolve().parents[3]


load_dotenv(BASE_DIR / ".env")

# fastapi-mail treats presence of these flags as truthy; remove to rely on explicit config below.
os.environ.pop("MAIL_TLS", None)
os.environ.pop("MAIL_SSL", None)

logger = logging.getLogger(__name__)


def _env_flag(name: str, *, default: Optional[bool] = False) -> Optional[bool]:
    """
    Helper to parse boolean-like environment variables.
    """
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


class CustomConnectionConfig(ConnectionConfig):
    """FastMail config that ignores extra fields to tolerate lenient env mapping."""

    model_config = ConfigDict(extra="ignore")


class Settings(BaseSettings):
    """Application configuration loaded from environment variables.

    Behavior highlights:
    - Loads `.env` at repo root, then lets process env override.
    - Enforces safe DB URLs (prefers `DATABASE_URL`, ensures `_test` suffix for test DBs).
    - Feature toggles parsed via `_env_flag` to accept common truthy/falsey strings.
    - CORS/hosts normalized once to avoid mutation side effects in settings instances.
    """

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: Optional[str] = os.getenv("DATABASE_URL")
    test_database_url: Optional[str] = os.getenv("TEST_DATABASE_URL")
    database_hostname: Optional[str] = os.getenv("DATABASE_HOSTNAME")
    database_port: str = os.getenv("DATABASE_PORT", "5432")
    database_password: Optional[str] = os.getenv("DATABASE_PASSWORD")
    database_name: Optional[str] = os.getenv("DATABASE_NAME")
    database_username: Optional[str] = os.getenv("DATABASE_USERNAME")
    database_ssl_mode: str = os.getenv("DATABASE_SSL_MODE", "require")
    environment: str = os.getenv("APP_ENV", "production")
    force_https: bool = False
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_dir: Optional[str] = os.getenv("LOG_DIR", "logs")
    use_json_logs: bool = _env_flag("USE_JSON_LOGS", default=True)
    # Accept raw string from env to avoid JSON parse errors; we normalize to list in __init__
    allowed_hosts: Optional[str] = os.getenv("ALLOWED_HOSTS")
    cors_origins: list[str] = []

    SITE_URL: str = os.getenv("SITE_URL", "http://localhost:3000")
    SITE_NAME: str = os.getenv("SITE_NAME", "Photo Community")
    encrypt_key: str = os.getenv("ENCRYPT_KEY", "")

    secret_key: str = os.getenv("SECRET_KEY", "")
    algorithm: str = os.getenv("ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 30))

    mail_username: Optional[str] = os.getenv("MAIL_USERNAME")
    mail_password: Optional[str] = os.getenv("MAIL_PASSWORD")
    mail_from: Optional[EmailStr] = os.getenv("MAIL_FROM")
    mail_port: int = int(os.getenv("MAIL_PORT", 587))
    mail_server: Optional[str] = os.getenv("MAIL_SERVER")
    email_from_name: str = os.getenv("EMAIL_FROM_NAME", "Photo Community")
    email_reply_to_address: Optional[str] = os.getenv("EMAIL_REPLY_TO_ADDRESS")
    email_reply_to_name: Optional[str] = os.getenv("EMAIL_REPLY_TO_NAME")

    NOTIFICATION_FANOUT_CONCURRENCY: int = int(
        os.getenv("NOTIFICATION_FANOUT_CONCURRENCY", 5)
    )
    NOTIFICATION_FEED_MAX_LIMIT: int = 100
    COMMENT_RATE_LIMIT: str = os.getenv("COMMENT_RATE_LIMIT", "30/minute")

    REDIS_URL: Optional[str] = os.getenv("REDIS_URL")

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        env_override = os.getenv("APP_ENV")
        if env_override:
            object.__setattr__(self, "environment", env_override)

        if not self.REDIS_URL:
            logger.warning("REDIS_URL is not set, page cache invalidation is disabled.")

        if not self.encrypt_key:
            logger.warning("ENCRYPT_KEY is not set, opt-out links will be omitted.")

        cors_env = os.getenv("CORS_ORIGINS")
        if cors_env:
            origins = [
                origin.strip() for origin in cors_env.split(",") if origin.strip()
            ]
        elif self.cors_origins:
            origins = self.cors_origins
        else:
            origins = [self.site_url]
        object.__setattr__(self, "cors_origins", origins)

        hosts_raw = self.allowed_hosts or os.getenv("ALLOWED_HOSTS", "")
        hosts: list[str]
        if hosts_raw:
            try:
                hosts = [h.strip() for h in json.loads(hosts_raw)]
            except ValueError:
                hosts = [h.strip() for h in str(hosts_raw).split(",") if h.strip()]
        else:
            hosts = ["*"]
        if self.environment.lower() == "test" and "*" not in hosts and "testserver" not in hosts:
            hosts.append("testserver")
        object.__setattr__(self, "allowed_hosts", hosts)

        env_force_https = os.getenv("FORCE_HTTPS")
        if env_force_https:
            object.__setattr__(
                self,
                "force_https",
                env_force_https.lower() not in {"0", "false", "no", "off"},
            )

    def get_database_url(self, *, use_test: bool = False) -> str:
        """Resolve the SQLAlchemy database URL for runtime or tests.

        Priority: explicit `DATABASE_URL` (or `_test` variant when requested),
        then composed Postgres parts, then `TEST_DATABASE_URL`.
        Enforces dedicated test DB names to avoid destructive writes to prod data.
        """
        if use_test:
            test_url = self._resolve_test_database_url()
            if test_url.startswith("sqlite"):
                return test_url
            if "_test" not in test_url:
                raise ValueError(
                    "Test database URL must point to a dedicated test database (contains '_test')."
                )
            return test_url

        if self.database_url:
            return self.database_url

        composed = self._compose_postgres_url(self.database_name)
        if composed:
            return composed

        if self.test_database_url:
            return self.test_database_url

        raise ValueError(
            "Database configuration is incomplete; please set DATABASE_URL or the individual components."
        )

    def _compose_postgres_url(self, database_name: Optional[str]) -> Optional[str]:
        if not (
            self.database_hostname
            and self.database_username
            and self.database_password
            and database_name
        ):
            return None
        base_url = (
            f"postgresql+psycopg2://{self.database_username}:{self.database_password}"
            f"@{self.database_hostname}:{self.database_port}/{database_name}"
        )
        if self.database_ssl_mode:
            return f"{base_url}?sslmode={self.database_ssl_mode}"
        return base_url

    def _resolve_test_database_url(self) -> str:
        """
        Build a test database URL.
        Priority:
        1) Explicit TEST_DATABASE_URL env.
        2) Derive from DATABASE_URL with a *_test suffix (or reuse sqlite).
        3) Derive from Postgres components with a *_test suffix.
        4) Fallback to sqlite for ad-hoc local runs.
        """
        if self.test_database_url:
            return self.test_database_url

        if self.database_url:
            from sqlalchemy.engine import make_url

            url = make_url(self.database_url)
            if url.drivername.startswith("sqlite"):
                return self.database_url
            db_name = url.database or ""
            suffix_name = db_name if db_name.endswith("_test") else f"{db_name}_test"
            return url.set(database=suffix_name).render_as_string(hide_password=False)

        if self.database_name:
            composed = self._compose_postgres_url(f"{self.database_name}_test")
            if composed:
                return composed

        return "sqlite:///./test.db"

    @property
    def site_url(self) -> str:
        """Public site origin without a trailing slash."""
        return (self.SITE_URL or "").rstrip("/")

    @property
    def redis_url(self) -> Optional[str]:
        return self.REDIS_URL or None

    @property
    def mail_enabled(self) -> bool:
        if self.environment.lower() == "test":
            return False
        if os.getenv("DISABLE_EXTERNAL_NOTIFICATIONS") == "1":
            return False
        return bool(self.mail_username and self.mail_password and self.mail_server)

    @property
    def mail_config(self) -> ConnectionConfig:
        from_address = self.mail_from or "noreply@example.com"
        config_data = {
            # FastMail requires string fields; fallback to empty strings in test/CI.
            "MAIL_USERNAME": self.mail_username or "",
            "MAIL_PASSWORD": self.mail_password or "",
            "MAIL_FROM": from_address,
            "MAIL_PORT": self.mail_port,
            "MAIL_SERVER": self.mail_server or "",
            "MAIL_FROM_NAME": self.email_from_name,
            "MAIL_STARTTLS": True,
            "MAIL_SSL_TLS": False,
            "USE_CREDENTIALS": True,
        }
        return CustomConnectionConfig(**config_data)
