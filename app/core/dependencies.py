"""
FastAPI Authentication Dependencies
This module provides FastAPI dependency functions that can be injected into route handlers
to automatically extract and validate session tokens from the Authorization header.
Usage in endpoints:
    @router.get("/protected")
    def protected_route(wallet_address: str = Depends(get_current_user)):
        # wallet_address is automatically extracted from the session token
        return {"user": wallet_address}
Flow:
1. Client sends request with Authorization: Bearer <token> header
2. FastAPI calls get_current_user() dependency
3. _extract_token() extracts token from header
4. verify_token() validates the JWT (from jwt_utils.py)
5. Returns wallet_address to the route handler
The gate only establishes identity; ownership of a resource is checked by the
resource endpoint against the returned wallet address.
"""

from typing import Any, Dict, Optional

from fastapi import Depends, Header

from app.core.exceptions import Unauthorized
from app.core.jwt_utils import verify_token

INVALID_HEADER_DETAIL = "Missing or invalid authorization header"


def _extract_token(authorization: Optional[str]) -> str:
    """
    Extract the session token from the Authorization header.
    Only the "Bearer <token>" scheme is accepted.
    Raises:
        Unauthorized: If Authorization header is missing or malformed
    """
    if not authorization:
        raise Unauthorized(INVALID_HEADER_DETAIL)

    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token or " " in token:
        raise Unauthorized(INVALID_HEADER_DETAIL)

    return token


def get_session(
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> Dict[str, Any]:
    """
    returning the decoded session claims.
    """
    return verify_token(_extract_token(authorization))


def get_current_user(session: Dict[str, Any] = Depends(get_session)) -> str:
    """
    returning wallet address.
    """
    return session["wallet_address"]
