from datetime import datetime
from typing import Any, List, Optional

from pydantic import Field, field_validator

from app.core.wallet_auth import is_valid_address
from app.schemas.my_base_model import CustomBaseModel


class ContractCreateRequest(CustomBaseModel):
    """Request model for saving a deployed contract"""

    contract_address: str = Field(..., min_length=1, description="Deployed contract address")
    abi: List[Any] = Field(..., min_length=1, description="Contract ABI (JSON array)")
    label: Optional[str] = Field(default=None, max_length=255)
    network: Optional[str] = Field(default=None, max_length=64)

    @field_validator("contract_address")
    @classmethod
    def check_address(cls, value: str) -> str:
        if not is_valid_address(value):
            raise ValueError("Invalid contract address")
        return value.strip().lower()


class ContractUpdateRequest(CustomBaseModel):
    """Request model for renaming a saved contract or changing its network"""

    label: Optional[str] = Field(default=None, max_length=255)
    network: Optional[str] = Field(default=None, max_length=64)


class ContractItem(CustomBaseModel):
    """Saved contract - output"""

    id: str
    owner_address: str
    contract_address: str
    abi: List[Any] = Field(default_factory=list)
    label: Optional[str] = None
    network: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ContractResponse(CustomBaseModel):
    contract: ContractItem


class ContractListResponse(CustomBaseModel):
    contracts: List[ContractItem] = Field(default_factory=list)
    total: int = 0


class DeleteResponse(CustomBaseModel):
    success: bool = True
