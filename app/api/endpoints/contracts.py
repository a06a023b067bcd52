import logging
from typing import List

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.dependencies import get_current_user
from app.core.exceptions import Forbidden, InvalidInput, NotFound, StorageError
from app.db.session import get_db
from app.models.contracts import SavedContract
from app.schemas.contracts import (
    ContractCreateRequest,
    ContractItem,
    ContractListResponse,
    ContractResponse,
    ContractUpdateRequest,
    DeleteResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()
group_tags: List[str] = ["Contracts"]


"""
Contracts saved by a wallet after deployment.

Every route requires a session token. The wallet address from the token is the only
owner key: lists and inserts are scoped to it, and a record owned by another wallet
is rejected with 403 on read/update/delete.

table: saved_contracts -> SavedContract
columns:
    owner_address: str (lower-cased wallet)
    contract_address: str (lower-cased, unique per owner)
    abi: json array
    label: str (optional)
    network: str (optional)
"""


def _get_owned_contract(db: Session, contract_id: str, wallet_address: str) -> SavedContract:
    contract = db.get(SavedContract, contract_id)
    if contract is None:
        raise NotFound("Contract not found")
    if contract.owner_address != wallet_address:
        logger.warning("wallet %s denied access to contract %s", wallet_address, contract_id)
        raise Forbidden("Contract does not belong to this wallet")
    return contract


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("failed to %s contract", action)
        raise StorageError(f"Failed to {action} contract")


@router.get(
    "",
    tags=group_tags,
    response_model=ContractListResponse,
    status_code=status.HTTP_200_OK,
)
def list_contracts(
    wallet_address: str = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ContractListResponse:
    """Get all contracts saved by the authenticated wallet, newest first."""
    contracts = (
        db.query(SavedContract)
        .filter(SavedContract.owner_address == wallet_address)
        .order_by(SavedContract.created_at.desc())
        .all()
    )
    items = [ContractItem.model_validate(c) for c in contracts]
    return ContractListResponse(contracts=items, total=len(items))


@router.post(
    "",
    tags=group_tags,
    response_model=ContractResponse,
    status_code=status.HTTP_200_OK,
)
def save_contract(
    body: ContractCreateRequest,
    wallet_address: str = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ContractResponse:
    """
    Save a deployed contract for the authenticated wallet.

    Saving the same contract address twice updates the existing record.
    """
    contract = (
        db.query(SavedContract)
        .filter(
            SavedContract.owner_address == wallet_address,
            SavedContract.contract_address == body.contract_address,
        )
        .first()
    )
    if contract is None:
        contract = SavedContract(owner_address=wallet_address, contract_address=body.contract_address)
        db.add(contract)
    contract.abi = body.abi
    contract.label = body.label or None
    contract.network = body.network or None

    _commit(db, "save")
    db.refresh(contract)
    logger.info("wallet %s saved contract %s", wallet_address, contract.contract_address)
    return ContractResponse(contract=ContractItem.model_validate(contract))


@router.get(
    "/{contract_id}",
    tags=group_tags,
    response_model=ContractResponse,
)
def get_contract(
    contract_id: str = Path(..., description="Saved contract id"),
    wallet_address: str = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ContractResponse:
    contract = _get_owned_contract(db, contract_id, wallet_address)
    return ContractResponse(contract=ContractItem.model_validate(contract))


@router.patch(
    "/{contract_id}",
    tags=group_tags,
    response_model=ContractResponse,
)
def update_contract(
    body: ContractUpdateRequest,
    contract_id: str = Path(..., description="Saved contract id"),
    wallet_address: str = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ContractResponse:
    """Change the label and/or network of a saved contract."""
    changes = body.model_dump(exclude_unset=True)
    if not changes:
        raise InvalidInput("Nothing to update")

    contract = _get_owned_contract(db, contract_id, wallet_address)
    for field, value in changes.items():
        setattr(contract, field, value or None)

    _commit(db, "update")
    db.refresh(contract)
    return ContractResponse(contract=ContractItem.model_validate(contract))


@router.delete(
    "/{contract_id}",
    tags=group_tags,
    response_model=DeleteResponse,
)
def delete_contract(
    contract_id: str = Path(..., description="Saved contract id"),
    wallet_address: str = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> DeleteResponse:
    contract = _get_owned_contract(db, contract_id, wallet_address)
    db.delete(contract)
    _commit(db, "delete")
    logger.info("wallet %s deleted contract %s", wallet_address, contract_id)
    return DeleteResponse(success=True)
