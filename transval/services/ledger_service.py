"""
Transaction Validation API — Transaction Ledger
================================================

What:  Transaction lifecycle: create, list, and the one-shot status decision.
Who:   Called by the /transactions routes after the access control gate.

State machine:
    PENDING ──▶ APPROVED   (terminal)
    PENDING ──▶ REJECTED   (terminal)

    `set_status` is NOT idempotent: deciding an already-decided transaction
    always fails, even with the same status.

Race handling:
    The PENDING check happens twice. The first read gives precise errors
    (404 vs already decided). The write itself is the repository's
    conditional update, which only succeeds while the row is still PENDING;
    losing that race is reported exactly like the first check.
"""

import logging
import uuid
from decimal import Decimal, InvalidOperation
from typing import List, Union

from transval.exceptions import InvalidStateTransition, NotFound, ValidationFailed
from transval.models import TransactionStatus
from transval.models.transaction import DECISION_STATUSES
from transval.repositories import TransactionRepository
from transval.schemas.transaction import TransactionResponse

logger = logging.getLogger(__name__)


class LedgerService:
    """Business rules for transactions over a TransactionRepository."""

    def __init__(self, transactions: TransactionRepository):
        self._transactions = transactions

    async def create(
        self,
        owner_id: uuid.UUID,
        amount: Union[Decimal, int, float],
    ) -> TransactionResponse:
        """
        Record a new PENDING transaction owned by `owner_id`.

        Raises:
            ValidationFailed: amount is not a finite positive number
        """
        value = _to_positive_decimal(amount)
        transaction = await self._transactions.create(
            user_id=owner_id,
            amount=value,
            status=TransactionStatus.PENDING,
        )
        logger.info("Transaction %s created by %s (amount=%s)", transaction.id, owner_id, value)
        return TransactionResponse.model_validate(transaction)

    async def list_for_owner(self, owner_id: uuid.UUID) -> List[TransactionResponse]:
        """Every transaction owned by `owner_id`, any status, store order."""
        rows = await self._transactions.find_many(user_id=owner_id)
        return [TransactionResponse.model_validate(t) for t in rows]

    async def list_pending(self) -> List[TransactionResponse]:
        """Every PENDING transaction across all owners. Admin-only at the route."""
        rows = await self._transactions.find_many(status=TransactionStatus.PENDING)
        return [TransactionResponse.model_validate(t) for t in rows]

    async def set_status(
        self,
        transaction_id: uuid.UUID,
        new_status: TransactionStatus,
    ) -> TransactionResponse:
        """
        Decide a PENDING transaction.

        Raises:
            ValidationFailed: new_status is not APPROVED or REJECTED
            NotFound: no transaction with this id
            InvalidStateTransition: transaction already approved or rejected
        """
        if new_status not in DECISION_STATUSES:
            raise ValidationFailed(
                message="status must be one of: APPROVED, REJECTED",
                field="status",
            )

        current = await self._transactions.find_by_id(transaction_id)
        if current is None:
            raise NotFound(resource="transaction", resource_id=str(transaction_id))

        if current.status.is_terminal:
            raise InvalidStateTransition(
                transaction_id=str(transaction_id),
                current_status=current.status.value,
            )

        updated = await self._transactions.update_status_if_pending(transaction_id, new_status)
        if updated is None:
            # Another decision landed between our read and our write
            logger.warning("Transaction %s was decided concurrently", transaction_id)
            raise InvalidStateTransition(transaction_id=str(transaction_id))

        logger.info("Transaction %s moved PENDING -> %s", transaction_id, new_status.value)
        return TransactionResponse.model_validate(updated)


def _to_positive_decimal(amount: Union[Decimal, int, float]) -> Decimal:
    if isinstance(amount, bool):
        raise ValidationFailed(message="amount must be a number", field="amount")
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise ValidationFailed(message="amount must be a number", field="amount")
    if not value.is_finite() or value <= 0:
        raise ValidationFailed(message="amount must be a positive number", field="amount")
    return value
