"""Aggregate API router mounted under /api."""

from fastapi import APIRouter

from gallery_notifications.routers import (
    comment,
    email_preferences,
    notifications,
    unsubscribe,
)

api_router = APIRouter(prefix="/api")

api_router.include_router(comment.router)
api_router.include_router(notifications.router)
api_router.include_router(email_preferences.router)
api_router.include_router(unsubscribe.router)

__all__ = ["api_router"]
