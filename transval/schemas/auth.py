"""
Transaction Validation API — Authentication Schemas
====================================================

What:  Login contract, decoded token claims, and the identity attached to a
       request once the access control gate has let it through.
"""

import uuid

from pydantic import BaseModel, ConfigDict, Field

from transval.models import Role
from transval.schemas.user import EmailAddress


class LoginRequest(BaseModel):
    """Body of POST /auth/login."""
    model_config = ConfigDict(extra="forbid")

    email: EmailAddress = Field(description="Email of the user", examples=["user@example.com"])
    password: str = Field(min_length=1, max_length=128, description="Password of the user")


class AccessTokenResponse(BaseModel):
    """Returned by a successful login. Send it back as `Authorization: Bearer <token>`."""
    access_token: str = Field(description="Signed HS256 bearer token")


class TokenClaims(BaseModel):
    """
    Decoded bearer token payload.

    sub:   user id (UUID string)
    email: user email at issuance; the gate resolves the user by this claim
    iat / exp: issued-at / expiry as Unix timestamps
    """
    sub: str = Field(description="Subject (user ID)")
    email: str = Field(description="User's email")
    iat: int = Field(description="Issued at timestamp")
    exp: int = Field(description="Expiration timestamp")


class CurrentUser(BaseModel):
    """
    The caller's resolved identity.

    Built from the store (not the token) on every protected request, so the
    role is always the current one.
    """
    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    email: str
    role: Role
