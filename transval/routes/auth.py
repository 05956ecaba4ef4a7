"""
Transaction Validation API — Auth Route Handlers
=================================================

What:  POST /auth/login exchanges an email/password pair for a bearer token.
"""

from fastapi import APIRouter, Depends

from transval.dependencies import get_identity_service, get_token_service
from transval.schemas.auth import AccessTokenResponse, LoginRequest
from transval.schemas.common import ErrorResponse
from transval.services import IdentityService, TokenService

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=AccessTokenResponse,
    responses={
        200: {"description": "Login successful, returns JWT token", "model": AccessTokenResponse},
        400: {"description": "Validation failed", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
    summary="User login",
)
async def login(
    body: LoginRequest,
    identity: IdentityService = Depends(get_identity_service),
    tokens: TokenService = Depends(get_token_service),
) -> AccessTokenResponse:
    """
    Validate credentials and issue a token.

    Unknown email and wrong password produce the same 401 body.
    """
    user = await identity.authenticate(body.email, body.password)
    return AccessTokenResponse(access_token=tokens.issue(user))
