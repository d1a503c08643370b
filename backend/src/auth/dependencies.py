"""FastAPI dependencies for authentication and authorization.

The requester's identity is resolved once per request from the bearer token
and handed to the order operations as an explicit Requester object.

Usage:
    @router.post("/orders/{order_id}/convert")
    def convert(order_id: str, requester: Requester = Depends(get_current_requester)):
        ...
"""

from dataclasses import dataclass
from typing import Annotated, Callable, Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .jwt import decode_token
from .roles import UserRole, has_permission


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Requester:
    """Authenticated caller of the current request."""
    id: int
    role: UserRole
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_requester(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Requester:
    """Validate the bearer token and build the Requester from its claims.

    Raises:
        HTTPException 401: If token is missing, invalid, expired, or its
            claims are malformed
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")

    try:
        payload = decode_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError as e:
        raise _unauthorized(str(e))

    subject = payload.get("sub")
    if not subject:
        raise _unauthorized("Invalid token: missing subject claim")

    try:
        return Requester(
            id=int(subject),
            role=UserRole(payload.get("role", UserRole.CUSTOMER.value)),
            email=payload.get("email"),
        )
    except ValueError as e:
        raise _unauthorized(f"Invalid token claims: {str(e)}")


def require_role(required_role: UserRole) -> Callable:
    """Create a dependency that enforces the role hierarchy.

    Example:
        @router.get("/orders")
        def list_all(requester: Requester = Depends(require_role(UserRole.ADMIN))):
            ...
    """

    def role_dependency(requester: Requester = Depends(get_current_requester)) -> Requester:
        if not has_permission(requester.role, required_role):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required role: {required_role.value}",
            )
        return requester

    return role_dependency


# Type alias for dependency injection
CurrentRequester = Annotated[Requester, Depends(get_current_requester)]
