"""
Transaction Validation API — User Route Handlers
=================================================

What:  POST /users/register. Open endpoint; any client may register as USER or ADMIN.
"""

import logging

from fastapi import APIRouter, Depends, status

from transval.dependencies import get_identity_service
from transval.schemas.common import ErrorResponse
from transval.schemas.user import RegisterRequest, UserResponse
from transval.services import IdentityService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=UserResponse,
    responses={
        201: {"description": "User successfully registered", "model": UserResponse},
        400: {"description": "Validation failed", "model": ErrorResponse},
        409: {"description": "Email already exists", "model": ErrorResponse},
    },
    summary="Register a new user or admin",
)
async def register(
    body: RegisterRequest,
    identity: IdentityService = Depends(get_identity_service),
) -> UserResponse:
    return await identity.register(
        email=body.email,
        password=body.password,
        role=body.role,
    )
