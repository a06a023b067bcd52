from pydantic import Field, field_validator

from app.core.wallet_auth import is_valid_address
from app.schemas.my_base_model import CustomBaseModel


class NonceRequest(CustomBaseModel):
    """Request model for nonce generation - input validation"""

    wallet_address: str = Field(..., min_length=1, description="Wallet address (0x + 40 hex chars)")

    @field_validator("wallet_address")
    @classmethod
    def check_address(cls, value: str) -> str:
        if not is_valid_address(value):
            raise ValueError("Invalid wallet address")
        return value.strip()


class NonceResponse(CustomBaseModel):
    """Response model for nonce generation - output"""

    nonce: str
    message: str = Field(..., description="Exact text the wallet must sign")
    expires_at: int = Field(..., description="Nonce expiry, epoch seconds")


class VerifyRequest(CustomBaseModel):
    """Request model for wallet verification - input validation"""

    wallet_address: str = Field(..., min_length=1, description="Wallet address")
    signature: str = Field(..., min_length=1, description="personal_sign signature of the nonce message")
    nonce: str = Field(..., min_length=1, description="Nonce to verify")


class AuthResponse(CustomBaseModel):
    """Response model for authentication - output"""

    session_token: str
    token_type: str = "bearer"
    expires_in_seconds: int
    wallet_address: str


class SessionInfo(CustomBaseModel):
    """Claims of the session presented in the Authorization header"""

    wallet_address: str
    issued_at: int
    expires_at: int
