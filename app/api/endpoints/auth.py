from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.dependencies import get_session
from app.db.session import get_db
import app.schemas.auth as schemas
from app.services.wallet_auth import WalletAuthService

router = APIRouter()
group_tags: List[str] = ["Auth"]


@router.post(
    "/nonce",
    tags=group_tags,
    response_model=schemas.NonceResponse,
    status_code=status.HTTP_200_OK,
)
def request_nonce(body: schemas.NonceRequest, db: Session = Depends(get_db)) -> schemas.NonceResponse:
    """
    Generate and store a single-use nonce for a wallet address.

    The returned `message` is the exact text the wallet must sign (personal_sign).
    The nonce expires after NONCE_EXPIRY_SECONDS.
    """
    challenge = WalletAuthService(db).request_nonce(body.wallet_address)
    return schemas.NonceResponse(
        nonce=challenge.nonce,
        message=challenge.message,
        expires_at=challenge.expires_at,
    )


@router.post(
    "/verify",
    tags=group_tags,
    response_model=schemas.AuthResponse,
)
def verify_wallet(body: schemas.VerifyRequest, db: Session = Depends(get_db)) -> schemas.AuthResponse:
    """
    Verify a signed nonce message and return a session token.

    On success the nonce is consumed. An invalid signature leaves the nonce usable,
    an unknown/expired/used nonce requires requesting a new one.
    """
    grant = WalletAuthService(db).verify(body.wallet_address, body.signature, body.nonce)
    return schemas.AuthResponse(
        session_token=grant.session_token,
        expires_in_seconds=grant.expires_in,
        wallet_address=grant.wallet_address,
    )


@router.get(
    "/session",
    tags=group_tags,
    response_model=schemas.SessionInfo,
)
def get_session_info(session: Dict[str, Any] = Depends(get_session)) -> schemas.SessionInfo:
    """Describe the session carried by the bearer token."""
    return schemas.SessionInfo(
        wallet_address=session["wallet_address"],
        issued_at=int(session["iat"]),
        expires_at=int(session["exp"]),
    )
