"""
Transaction Validation API — Transaction Route Handlers
========================================================

What:  Create and list transactions; admins list pending ones and decide them.

Guards:
    require_user   → any authenticated caller (401 otherwise)
    require_admin  → authenticated ADMIN (401 / 403 otherwise)
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from transval.dependencies import get_ledger_service, require_admin, require_user
from transval.schemas.auth import CurrentUser
from transval.schemas.common import ErrorResponse
from transval.schemas.transaction import (
    CreateTransactionRequest,
    TransactionResponse,
    UpdateTransactionStatusRequest,
)
from transval.services import LedgerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["Transactions"])

_UNAUTHORIZED = {401: {"description": "Missing, invalid or expired token", "model": ErrorResponse}}
_FORBIDDEN = {403: {"description": "Forbidden", "model": ErrorResponse}}


@router.post(
    "/create",
    status_code=status.HTTP_201_CREATED,
    response_model=TransactionResponse,
    responses={
        201: {"description": "Transaction created successfully", "model": TransactionResponse},
        400: {"description": "Validation failed", "model": ErrorResponse},
        **_UNAUTHORIZED,
    },
    summary="Create a new transaction",
)
async def create_transaction(
    body: CreateTransactionRequest,
    user: CurrentUser = Depends(require_user),
    ledger: LedgerService = Depends(get_ledger_service),
) -> TransactionResponse:
    return await ledger.create(owner_id=user.id, amount=body.amount)


@router.get(
    "",
    response_model=List[TransactionResponse],
    responses={**_UNAUTHORIZED},
    summary="Get all transactions for the logged-in user",
)
async def list_my_transactions(
    user: CurrentUser = Depends(require_user),
    ledger: LedgerService = Depends(get_ledger_service),
) -> List[TransactionResponse]:
    return await ledger.list_for_owner(user.id)


@router.get(
    "/pending",
    response_model=List[TransactionResponse],
    responses={**_UNAUTHORIZED, **_FORBIDDEN},
    summary="Get all pending transactions (Admin only)",
)
async def list_pending_transactions(
    admin: CurrentUser = Depends(require_admin),
    ledger: LedgerService = Depends(get_ledger_service),
) -> List[TransactionResponse]:
    return await ledger.list_pending()


@router.patch(
    "/{transaction_id}/status",
    response_model=TransactionResponse,
    responses={
        400: {"description": "Invalid status, or transaction already decided", "model": ErrorResponse},
        **_UNAUTHORIZED,
        **_FORBIDDEN,
        404: {"description": "Transaction not found", "model": ErrorResponse},
    },
    summary="Approve or reject a transaction (Admin only)",
)
async def update_transaction_status(
    transaction_id: UUID,
    body: UpdateTransactionStatusRequest,
    admin: CurrentUser = Depends(require_admin),
    ledger: LedgerService = Depends(get_ledger_service),
) -> TransactionResponse:
    """
    Decide a PENDING transaction. Not idempotent: a second call on the same
    transaction returns 400 whatever status it asks for.
    """
    logger.info("Admin %s deciding transaction %s -> %s", admin.id, transaction_id, body.status.value)
    return await ledger.set_status(transaction_id, body.status)
