"""
JWT Token Utilities

This module handles JSON Web Token (JWT) creation and verification for wallet sessions.
After a user successfully verifies their wallet signature, this module creates a JWT token
that can be used for subsequent authenticated API requests.

Flow:
1. User verifies wallet signature -> create_access_token() generates JWT
2. User makes API request with JWT in Authorization header -> verify_token() validates it
3. Protected endpoints use get_current_user() from dependencies.py to extract wallet_address

The JWT contains:
- wallet_address: The authenticated wallet address (lower-cased)
- iat: Issued at timestamp
- exp: Expiration timestamp (configurable via ACCESS_TOKEN_EXPIRE_SECONDS)

Sessions are stateless: nothing is stored server side, a token is valid if and only if
its HMAC verifies against ENCODE_KEY and the current time is strictly before exp.
"""

import logging
import time
from typing import Any, Dict, Optional, Tuple

import jwt

from app.core.config import settings
from app.core.exceptions import Unauthorized
from app.core.wallet_auth import normalize_address


if not settings.ENCODE_KEY:
    raise RuntimeError("ENCODE_KEY is not configured")

logger = logging.getLogger(__name__)

INVALID_SESSION_DETAIL = "Invalid or expired session token"
REQUIRED_CLAIMS = ["wallet_address", "iat", "exp"]


def _now() -> int:
    return int(time.time())


def create_access_token(wallet_address: str, now: Optional[int] = None) -> Tuple[str, int]:
    """
    Create a JWT access token for an authenticated wallet address.

    This is called after successful wallet signature verification in /auth/verify endpoint.
    The token is returned to the frontend and used in subsequent API requests.

    Args:
        wallet_address: The wallet address that was verified
        now: Issuance time in epoch seconds (defaults to the current time)

    Returns:
        (token, expires_in_seconds); the token goes in the Authorization: Bearer <token> header

    Raises:
        ValueError: If wallet_address is empty
    """
    address = normalize_address(wallet_address)
    if not address:
        raise ValueError("wallet_address is required")

    issued_at = _now() if now is None else int(now)
    expires_in = int(settings.ACCESS_TOKEN_EXPIRE_SECONDS)
    payload: Dict[str, Any] = {
        "wallet_address": address,
        "iat": issued_at,
        "exp": issued_at + expires_in,
    }

    token = jwt.encode(payload, settings.ENCODE_KEY, algorithm=settings.ENCODE_ALGORITHM)
    return token, expires_in


def verify_token(token: str, now: Optional[int] = None) -> Dict[str, Any]:
    """
    Verify and decode a JWT token.

    Checks token signature, required claims and expiration. The expiry check is done
    here rather than by PyJWT so the boundary is exact: a token checked at
    `now >= exp` is expired.

    Args:
        token: The JWT token string from Authorization header
        now: Check time in epoch seconds (defaults to the current time)

    Returns:
        Decoded JWT payload dictionary containing wallet_address, iat and exp

    Raises:
        Unauthorized: If token is missing, malformed, tampered, expired or missing claims
    """
    if not token:
        raise Unauthorized(INVALID_SESSION_DETAIL)

    try:
        payload = jwt.decode(
            token,
            settings.ENCODE_KEY,
            algorithms=[settings.ENCODE_ALGORITHM],
            options={"verify_exp": False, "verify_iat": False, "require": REQUIRED_CLAIMS},
        )
    except jwt.InvalidTokenError as e:
        logger.info("rejected session token: %s", type(e).__name__)
        raise Unauthorized(INVALID_SESSION_DETAIL)

    try:
        expires_at = int(payload["exp"])
    except (TypeError, ValueError):
        raise Unauthorized(INVALID_SESSION_DETAIL)

    check_time = _now() if now is None else int(now)
    if check_time >= expires_at:
        raise Unauthorized(INVALID_SESSION_DETAIL)

    if not isinstance(payload["wallet_address"], str) or not payload["wallet_address"]:
        raise Unauthorized(INVALID_SESSION_DETAIL)

    return payload
