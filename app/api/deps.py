"""API dependencies for authentication and common operations."""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.exceptions import AuthenticationError, AuthorizationError
from app.core.security import verify_token
from app.database import get_db

__all__ = ["AdminPrincipal", "get_current_admin", "get_current_principal", "get_db"]

# Security scheme
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AdminPrincipal:
    """Caller identity taken from a verified access token."""

    id: str
    role: str
    email: str | None = None


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> AdminPrincipal:
    """Get the caller from the bearer token."""
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    payload = verify_token(credentials.credentials, token_type="access")
    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token payload")

    return AdminPrincipal(
        id=str(user_id),
        role=str(payload.get("role", "")),
        email=payload.get("email"),
    )


async def get_current_admin(
    principal: Annotated[AdminPrincipal, Depends(get_current_principal)],
) -> AdminPrincipal:
    """Get current caller and verify they are an admin."""
    if principal.role != "admin":
        raise AuthorizationError("Admin access required")
    return principal
