"""Shared helpers for the comments domain."""

import logging

logger = logging.getLogger("gallery_notifications.comments")

MAX_COMMENT_LENGTH = 5000

__all__ = ["logger", "MAX_COMMENT_LENGTH"]
