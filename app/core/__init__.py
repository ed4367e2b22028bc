"""Core utilities: exceptions, security and middleware."""

from app.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    BadRequestError,
    NotFoundError,
)
from app.core.security import create_access_token, verify_token

__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "BadRequestError",
    "NotFoundError",
    "create_access_token",
    "verify_token",
]
