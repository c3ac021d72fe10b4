"""Application factory helpers to keep main.py lightweight."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session
from starlette.middleware.httpsredirect import HTTPSRedirectMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

from gallery_notifications.api.router import api_router
from gallery_notifications.core.cache.redis_cache import cache_manager
from gallery_notifications.core.config import settings
from gallery_notifications.core.database import get_db
from gallery_notifications.core.error_handlers import register_exception_handlers
from gallery_notifications.core.logging_config import setup_logging
from gallery_notifications.core.middleware import LoggingMiddleware, limiter

logger = logging.getLogger(__name__)


def _configure_app(app: FastAPI) -> None:
    allowed_hosts = settings.allowed_hosts or ["*"]
    if not (len(allowed_hosts) == 1 and allowed_hosts[0] == "*"):
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts)

    if settings.force_https:
        app.add_middleware(HTTPSRedirectMiddleware)

    app.add_middleware(LoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)


def _register_routes(app: FastAPI) -> None:
    @app.get("/livez", tags=["Health"])
    async def livez():
        return {"status": "ok"}

    @app.get("/readyz", tags=["Health"])
    async def readyz(db: Session = Depends(get_db)):
        health_status = {"database": "unknown", "redis": "unknown"}
        is_ready = True

        try:
            db.execute(text("SELECT 1"))
            health_status["database"] = "connected"
        except Exception as e:
            logger.error(f"Readiness check failed (Database): {e}")
            health_status["database"] = "disconnected"
            is_ready = False

        # Redis only backs the page cache, so an outage degrades but never blocks readiness.
        if cache_manager.enabled and cache_manager.redis:
            try:
                await cache_manager.redis.ping()
                health_status["redis"] = "connected"
            except Exception as e:
                logger.warning(f"Readiness check (Redis): {e}")
                health_status["redis"] = "disconnected"
        elif settings.redis_url:
            health_status["redis"] = "disconnected"
        else:
            health_status["redis"] = "skipped"

        if not is_ready:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=health_status
            )
        return {"status": "ready", "details": health_status}


def _lifespan_factory():
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await cache_manager.init_cache()
        yield
        await cache_manager.close()

    return lifespan


def create_app() -> FastAPI:
    """
    Application Factory to create and configure the FastAPI application.
    Integrates Logging, Error Handling, Rate Limiting, and Middleware.
    """
    setup_logging(
        log_level=settings.log_level,
        log_dir=None if settings.environment.lower() == "test" else settings.log_dir,
        app_name="gallery_notifications",
        use_json=settings.use_json_logs,
    )

    app = FastAPI(
        title="Gallery Comment Notifications",
        description="Comment creation with owner, admin and reply notifications for the photo community",
        version="1.0.0",
        lifespan=_lifespan_factory(),
        default_response_class=ORJSONResponse,
    )

    app.state.environment = settings.environment
    app.state.limiter = limiter

    _configure_app(app)
    _register_routes(app)
    register_exception_handlers(app)

    logger.info("Application startup complete")
    return app


__all__ = ["create_app"]
