"""
Nonce store backed by the auth_nonce table.

A nonce is a single-use challenge. Records are checked for expiry on read, so
expired rows are harmless; purge_expired() only keeps the table small.

Single use under concurrency relies on a conditional delete: consume_nonce()
deletes WHERE nonce, address and expires_at all match and only reports success
when the database says exactly one row was removed. Two verifications racing on the
same nonce can both read it, but only one of them can delete it.
"""

import logging
import time
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import StorageError
from app.core.wallet_auth import generate_nonce, normalize_address
from app.models.auth import AuthNonce

logger = logging.getLogger(__name__)


class NonceStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    @staticmethod
    def _now(now: Optional[int]) -> int:
        return int(time.time()) if now is None else int(now)

    def issue_nonce(self, wallet_address: str, now: Optional[int] = None) -> AuthNonce:
        """Create and persist a fresh nonce for the wallet address."""
        created_at = self._now(now)
        record = AuthNonce(
            nonce=generate_nonce(),
            address=normalize_address(wallet_address),
            created_at=created_at,
            expires_at=created_at + int(settings.NONCE_EXPIRY_SECONDS),
        )
        try:
            if settings.NONCE_PURGE_ON_ISSUE:
                self.db.execute(
                    delete(AuthNonce).where(AuthNonce.expires_at <= created_at),
                    execution_options={"synchronize_session": False},
                )
            self.db.add(record)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("failed to store nonce for %s", record.address)
            raise StorageError("Failed to generate nonce")
        return record

    def find_nonce(self, nonce: str, wallet_address: str, now: Optional[int] = None) -> Optional[AuthNonce]:
        """Return the unexpired record for (nonce, address) without consuming it."""
        query = select(AuthNonce).where(
            AuthNonce.nonce == (nonce or "").strip(),
            AuthNonce.address == normalize_address(wallet_address),
            AuthNonce.expires_at > self._now(now),
        )
        try:
            return self.db.execute(query).scalars().first()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("failed to load nonce")
            raise StorageError()

    def consume_nonce(self, nonce: str, wallet_address: str, now: Optional[int] = None) -> Optional[AuthNonce]:
        """
        Atomically fetch and delete the unexpired record for (nonce, address).

        Returns the deleted record, or None when it never existed, has expired, belongs
        to another address or was consumed by a concurrent caller. The cases are not
        distinguished.
        """
        check_time = self._now(now)
        record = self.find_nonce(nonce, wallet_address, now=check_time)
        if record is None:
            return None

        # snapshot before the row goes away
        consumed = AuthNonce(
            nonce=record.nonce,
            address=record.address,
            created_at=record.created_at,
            expires_at=record.expires_at,
        )
        stmt = delete(AuthNonce).where(
            AuthNonce.nonce == record.nonce,
            AuthNonce.address == record.address,
            AuthNonce.expires_at > check_time,
        )
        try:
            result = self.db.execute(stmt, execution_options={"synchronize_session": False})
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("failed to consume nonce")
            raise StorageError()

        if result.rowcount != 1:
            logger.info("nonce for %s already consumed", consumed.address)
            return None
        return consumed

    def purge_expired(self, now: Optional[int] = None) -> int:
        """Delete expired nonces, returning how many rows were removed."""
        try:
            result = self.db.execute(
                delete(AuthNonce).where(AuthNonce.expires_at <= self._now(now)),
                execution_options={"synchronize_session": False},
            )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("failed to purge expired nonces")
            raise StorageError()
        return result.rowcount
