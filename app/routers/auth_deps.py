"""
RBAC Dependencies.
Builds the identity context from the bearer token issued by the identity
service and provides role checks for FastAPI endpoints.
"""
import logging
from typing import Callable, List, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.exceptions import AccessDeniedError, AuthenticationError
from app.core.security import decode_access_token
from app.schemas.auth import CurrentUser, UserRole

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    """
    Extracts and validates the current user from the JWT token.
    """
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    payload = decode_access_token(credentials.credentials)

    if payload is None:
        logger.warning("Authentication failed: Invalid token")
        raise AuthenticationError()

    if payload.get("error") == "TOKEN_EXPIRED":
        logger.info("Authentication failed: Token expired")
        raise AuthenticationError("TOKEN_EXPIRED")

    if payload.get("type") != "access":
        logger.warning("Authentication failed: Invalid token type")
        raise AuthenticationError("Invalid token type")

    subject = payload.get("sub")
    try:
        user_id = int(subject)
        role = UserRole(payload.get("role"))
    except (TypeError, ValueError):
        logger.warning(f"Authentication failed: malformed claims (sub={subject!r})")
        raise AuthenticationError("Malformed token claims") from None

    return CurrentUser(id=user_id, role=role)


def require_role(allowed_roles: List[UserRole]) -> Callable:
    """
    Dependency factory that checks if the user has one of the allowed roles.

    Usage:
        @router.post("/periods")
        def create_period(user: CurrentUser = Depends(require_role([UserRole.ADMIN]))):
            ...
    """
    def role_checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in allowed_roles:
            raise AccessDeniedError(
                f"Access denied. Required roles: {[r.value for r in allowed_roles]}"
            )
        return current_user
    return role_checker


require_admin = require_role([UserRole.ADMIN])
require_manager = require_role([UserRole.ADMIN, UserRole.EXECUTIVE, UserRole.MANAGER])
