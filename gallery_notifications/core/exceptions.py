"""
Custom Exception Classes for the Application
Provides a unified error handling system with proper HTTP status codes and messages.
"""

from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class AppException(HTTPException):
    """
    Base exception class for all application exceptions.
    Provides consistent error response format.
    """

    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        super().__init__(
            status_code=status_code,
            detail={
                "error_code": error_code,
                "message": message,
                "details": self.details,
            },
            headers=headers,
        )


# ==================== Authentication Exceptions ====================


class AuthenticationException(AppException):
    """Base class for authentication-related exceptions."""

    def __init__(
        self,
        error_code: str = "authentication_failed",
        message: str = "Authentication required",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code=error_code,
            message=message,
            details=details,
            headers={"WWW-Authenticate": "Bearer"},
        )


class InvalidTokenException(AuthenticationException):
    """Raised when the bearer token is invalid, expired or names an unknown profile."""

    def __init__(self):
        super().__init__(
            error_code="invalid_token",
            message="Invalid authentication token",
        )


class AccountSuspendedException(AppException):
    """Raised when the profile is suspended."""

    def __init__(self):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="account_suspended",
            message="Your account has been suspended",
        )


# ==================== Authorization Exceptions ====================


class PermissionDeniedException(AppException):
    """Raised when user doesn't have permission to perform an action."""

    def __init__(
        self, message: str = "You don't have permission to perform this action"
    ):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="permission_denied",
            message=message,
        )


class OwnershipRequiredException(PermissionDeniedException):
    """Raised when action requires resource ownership."""

    def __init__(self, resource: str):
        super().__init__(
            message=f"You must be the author of this {resource} to perform this action"
        )


# ==================== Resource Exceptions ====================


class ResourceNotFoundException(AppException):
    """Raised when a requested resource doesn't exist."""

    def __init__(self, resource: str, identifier: Any = None):
        details = {"resource": resource}
        if identifier is not None:
            details["identifier"] = str(identifier)
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="resource_not_found",
            message=f"{resource} not found",
            details=details,
        )


# ==================== Validation Exceptions ====================


class ValidationException(AppException):
    """Raised when input fails business validation."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="validation_error",
            message=message,
            details=details,
        )


class InvalidOptOutTokenException(ValidationException):
    """Raised when an opt-out token cannot be decrypted or parsed."""

    def __init__(self):
        super().__init__(message="Invalid or expired unsubscribe link", field="token")


# ==================== System Exceptions ====================


class DatabaseException(AppException):
    """Raised when a write cannot be committed."""

    def __init__(self, message: str = "A database error occurred"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="database_error",
            message=message,
        )


__all__ = [
    "AppException",
    "AuthenticationException",
    "InvalidTokenException",
    "AccountSuspendedException",
    "PermissionDeniedException",
    "OwnershipRequiredException",
    "ResourceNotFoundException",
    "ValidationException",
    "InvalidOptOutTokenException",
    "DatabaseException",
]
