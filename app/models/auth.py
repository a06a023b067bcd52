from sqlalchemy import BigInteger, Column, Index, String

from app.db.base import Base


class AuthNonce(Base):
    """Model for storing single-use wallet authentication nonces.
    Example:
    {
        "nonce": "3f2b6c1e-8d1a-4c1b-9f51-0c7e2a6a1d55",
        "address": "0xab5801a7d398351b8be11c439e05c5b3259aec9b",
        "created_at": 1704110400,
        "expires_at": 1704110700
    }
    """

    __tablename__ = "auth_nonce"

    nonce = Column(String(64), primary_key=True)
    address = Column(String(42), nullable=False)  # lower-cased
    created_at = Column(BigInteger, nullable=False)  # epoch seconds, embedded in the signed message
    expires_at = Column(BigInteger, nullable=False)

    __table_args__ = (Index("ix_auth_nonce_expires_at", "expires_at"),)
