"""
Transaction Validation API — User Schemas
==========================================

What:  Request/response contracts for POST /users/register.
Why separate from the ORM model: the response model is the only shape a user
     ever leaves the service in, and it has no password_hash field at all.
"""

import uuid
from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from transval.models import Role
from transval.schemas.common import check_email_syntax

EmailAddress = Annotated[str, Field(max_length=255), AfterValidator(check_email_syntax)]


class RegisterRequest(BaseModel):
    """
    Body of POST /users/register.

    Unknown fields are rejected (400) rather than silently dropped.
    """
    model_config = ConfigDict(extra="forbid")

    email: EmailAddress = Field(
        description="The email of the user",
        examples=["user@example.com"],
    )
    password: str = Field(
        min_length=1,
        max_length=128,
        description="The password of the user",
        examples=["password123"],
    )
    role: Optional[Role] = Field(
        default=None,
        description="The role of the user (USER or ADMIN); defaults to USER",
    )


class UserResponse(BaseModel):
    """Public view of a user. Never carries the password hash."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID = Field(description="Unique user identifier (UUID)")
    email: str = Field(description="Email address as registered")
    role: Role = Field(description="USER or ADMIN")
    created_at: datetime = Field(description="Registration timestamp (UTC)")
