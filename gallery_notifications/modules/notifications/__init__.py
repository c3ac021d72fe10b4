"""Notifications domain package."""

from .models import EmailPreference, EmailType, Notification, NotificationType

__all__ = ["Notification", "NotificationType", "EmailType", "EmailPreference"]
