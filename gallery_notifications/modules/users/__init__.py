"""Community profiles domain package."""

from .models import Profile

__all__ = ["Profile"]
