"""
Transaction Validation API — Transaction Schemas
=================================================

What:  Request/response contracts for the /transactions endpoints.

Amount handling:
    Requests are parsed into Decimal and stored in an unscaled NUMERIC column,
    so any finite positive amount is kept as sent, with no precision cap. Responses emit
    a JSON number, which is what API clients compare against (`100.5`).
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from transval.models import TransactionStatus
from transval.models.transaction import DECISION_STATUSES


class CreateTransactionRequest(BaseModel):
    """Body of POST /transactions/create."""
    model_config = ConfigDict(extra="forbid")

    amount: Decimal = Field(
        gt=0,
        allow_inf_nan=False,
        description="The transaction amount (any finite positive number)",
        examples=[100.5],
    )

    @field_validator("amount", mode="before")
    @classmethod
    def amount_must_be_number(cls, v: Any) -> Any:
        """Rejects strings and booleans; only JSON numbers are amounts."""
        if isinstance(v, bool) or not isinstance(v, (int, float, Decimal)):
            raise ValueError("amount must be a number")
        return v


class UpdateTransactionStatusRequest(BaseModel):
    """Body of PATCH /transactions/{id}/status."""
    model_config = ConfigDict(extra="forbid")

    status: TransactionStatus = Field(description="APPROVED or REJECTED")

    @field_validator("status")
    @classmethod
    def status_must_be_decision(cls, v: TransactionStatus) -> TransactionStatus:
        if v not in DECISION_STATUSES:
            raise ValueError("status must be one of: APPROVED, REJECTED")
        return v


class TransactionResponse(BaseModel):
    """A transaction as returned by every /transactions endpoint."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID = Field(description="Unique transaction identifier")
    user_id: uuid.UUID = Field(description="Owner's user id")
    amount: float = Field(description="Positive amount")
    status: TransactionStatus = Field(description="PENDING, APPROVED or REJECTED")
    created_at: datetime = Field(description="Creation timestamp (UTC)")
    updated_at: Optional[datetime] = Field(default=None, description="Last status change (UTC)")

    @field_validator("amount", mode="before")
    @classmethod
    def decimal_to_float(cls, v: Any) -> Any:
        if isinstance(v, Decimal):
            return float(v)
        return v
