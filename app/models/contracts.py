import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, String, Text, UniqueConstraint
from sqlalchemy.sql import func

from app.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SavedContract(Base):
    """Model for contracts saved by a wallet
    Example:
    {
        "id": "550e8400-e29b-41d4-a716-446655440000",
        "owner_address": "0xab5801a7d398351b8be11c439e05c5b3259aec9b",
        "contract_address": "0x5fbdb2315678afecb367f032d93f642f64180aa3",
        "abi": [{"type": "function", "name": "mint", ...}],
        "label": "Carbon credits 2024",
        "network": "sepolia",
        "created_at": "2024-01-01T12:00:00",
        "updated_at": "2024-01-01T12:00:00"
    }
    """

    __tablename__ = "saved_contracts"
    __table_args__ = (
        UniqueConstraint("owner_address", "contract_address", name="uq_saved_contracts_owner_contract"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_address = Column(String(42), nullable=False, index=True)  # lower-cased wallet address
    contract_address = Column(String(42), nullable=False)  # lower-cased
    abi = Column(JSON, nullable=False)
    label = Column(Text, nullable=True)
    network = Column(String(64), nullable=True)
    created_at = Column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        onupdate=_utcnow,
        nullable=False,
    )
