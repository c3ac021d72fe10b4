"""Comments domain package."""

from .models import Comment

__all__ = ["Comment"]
