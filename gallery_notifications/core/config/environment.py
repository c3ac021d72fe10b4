"""Per-environment settings classes, selected by ``APP_ENV``."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Dict, Type

from fastapi_mail import FastMail

from .settings import Settings


class DevelopmentSettings(Settings):
    """Plain-text logs, loose comment throttling, a small fan-out pool."""

    environment: str = "development"
    use_json_logs: bool = False
    COMMENT_RATE_LIMIT: str = os.getenv("COMMENT_RATE_LIMIT", "120/minute")
    NOTIFICATION_FANOUT_CONCURRENCY: int = int(
        os.getenv("NOTIFICATION_FANOUT_CONCURRENCY", 2)
    )


class ProductionSettings(Settings):
    environment: str = "production"


class TestSettings(Settings):
    """Falls back to the test DSN and keeps outbound mail switched off."""

    environment: str = "test"
    use_json_logs: bool = False
    log_dir: str | None = None

    def model_post_init(self, __context) -> None:
        super().model_post_init(__context)
        if not self.database_url:
            object.__setattr__(self, "database_url", self.test_database_url)


ENVIRONMENTS: Dict[str, Type[Settings]] = {
    "development": DevelopmentSettings,
    "dev": DevelopmentSettings,
    "production": ProductionSettings,
    "prod": ProductionSettings,
    "test": TestSettings,
    "testing": TestSettings,
}


@lru_cache
def get_settings() -> Settings:
    env = os.getenv("APP_ENV", "production").lower()
    return ENVIRONMENTS.get(env, ProductionSettings)()


@lru_cache
def get_mail_client() -> FastMail:
    """Shared FastMail client used by the comment email dispatcher."""
    return FastMail(get_settings().mail_config)
