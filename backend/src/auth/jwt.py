"""JWT token generation and validation

Access tokens are issued by the storefront's auth service; this API only
validates them and turns their claims into a Requester. create_access_token
exists for the seed script and the test-suite.

Claims:
- sub: Customer/user id as a decimal string, e.g. "42"
- role: "ADMIN" | "SUPPLIER" | "CUSTOMER"
- email: Requester's email address
- iat / exp: Issued-at and expiry (Unix timestamps)

Algorithm and secret come from JWT_ALGORITHM / JWT_SECRET.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional

import jwt

from config import get_settings


def _get_jwt_secret() -> str:
    """Get JWT_SECRET from settings.

    Raises:
        ValueError: If JWT_SECRET is not set
    """
    secret = get_settings().JWT_SECRET
    if not secret:
        raise ValueError("JWT_SECRET environment variable is not set")
    return secret


def create_access_token(
    user_id: int,
    role: str,
    email: Optional[str] = None,
    expires_in: Optional[timedelta] = None
) -> str:
    """Create a signed access token for a requester.

    Args:
        user_id: Customer/user id
        role: Role claim (ADMIN, SUPPLIER, CUSTOMER)
        email: Optional email claim
        expires_in: Token lifetime (default JWT_EXPIRY_MINUTES)

    Returns:
        str: Signed JWT token
    """
    settings = get_settings()
    if expires_in is None:
        expires_in = timedelta(minutes=settings.JWT_EXPIRY_MINUTES)

    now = datetime.now(timezone.utc)
    payload = {
        'sub': str(user_id),
        'role': role,
        'iat': int(now.timestamp()),
        'exp': int((now + expires_in).timestamp())
    }
    if email:
        payload['email'] = email

    return jwt.encode(payload, _get_jwt_secret(), algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate a JWT token.

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid or tampered
        ValueError: If JWT_SECRET is not set
    """
    secret = _get_jwt_secret()

    try:
        return jwt.decode(token, secret, algorithms=[get_settings().JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise jwt.ExpiredSignatureError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise jwt.InvalidTokenError(f"Invalid token: {str(e)}")
