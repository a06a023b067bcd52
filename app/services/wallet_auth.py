"""
Wallet challenge/response login.

Two steps, with all state between them kept in the nonce store:

1. request_nonce(address)  -> nonce + message to sign
2. verify(address, signature, nonce) -> session token

verify() checks the signature before consuming the nonce, so a bad signature leaves
the nonce usable for another attempt, while the conditional delete in
NonceStore.consume_nonce still lets at most one valid attempt succeed.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from app.core.exceptions import InvalidInput, Unauthorized
from app.core.jwt_utils import create_access_token
from app.core.wallet_auth import (
    build_auth_message,
    is_valid_address,
    normalize_address,
    verify_signature,
)
from app.services.nonce_store import NonceStore

logger = logging.getLogger(__name__)

INVALID_NONCE_DETAIL = "Invalid or expired nonce"
INVALID_SIGNATURE_DETAIL = "Invalid signature"


@dataclass
class NonceChallenge:
    nonce: str
    message: str
    expires_at: int


@dataclass
class SessionGrant:
    session_token: str
    expires_in: int
    wallet_address: str


class WalletAuthService:
    def __init__(self, db: Session) -> None:
        self.nonces = NonceStore(db)

    def request_nonce(self, wallet_address: Optional[str]) -> NonceChallenge:
        if not wallet_address or not wallet_address.strip():
            raise InvalidInput("Wallet address required")
        if not is_valid_address(wallet_address):
            raise InvalidInput("Invalid wallet address")

        record = self.nonces.issue_nonce(wallet_address)
        logger.info("issued nonce for %s", record.address)
        return NonceChallenge(
            nonce=record.nonce,
            message=build_auth_message(record.nonce, record.created_at),
            expires_at=record.expires_at,
        )

    def verify(
        self,
        wallet_address: Optional[str],
        signature: Optional[str],
        nonce: Optional[str],
        now: Optional[int] = None,
    ) -> SessionGrant:
        if not wallet_address or not signature or not nonce:
            raise InvalidInput("Missing required fields")
        address = normalize_address(wallet_address)

        record = self.nonces.find_nonce(nonce, address, now=now)
        if record is None:
            logger.info("login rejected for %s: unknown or expired nonce", address)
            raise Unauthorized(INVALID_NONCE_DETAIL)

        # the message must be rebuilt from the persisted creation time
        message = build_auth_message(record.nonce, record.created_at)
        if not verify_signature(message, signature, address):
            logger.info("login rejected for %s: signature mismatch", address)
            raise Unauthorized(INVALID_SIGNATURE_DETAIL)

        if self.nonces.consume_nonce(record.nonce, address, now=now) is None:
            logger.info("login rejected for %s: nonce consumed concurrently", address)
            raise Unauthorized(INVALID_NONCE_DETAIL)

        token, expires_in = create_access_token(address, now=now)
        logger.info("wallet %s authenticated", address)
        return SessionGrant(session_token=token, expires_in=expires_in, wallet_address=address)
