"""
Transaction Validation API — Access Control Gate
=================================================

What:  Two-stage check applied to every protected operation.
How:   Plain functions of (token, token service, identity service, required
       roles). The FastAPI wiring in `transval.dependencies` only gathers
       those inputs from the request and calls `check_access()`.

Stages:
    1. Authentication: verify the bearer token, then resolve the user by the
       token's email claim. Bad/expired token or unknown user → Unauthenticated.
    2. Authorization: the resolved user's role must be in the operation's
       required set. Otherwise → Forbidden. Never runs without stage 1.

The gate holds no state of its own beyond the services it is handed.
"""

import logging
from typing import AbstractSet, Callable, Iterable, Optional

from transval.exceptions import Forbidden, Unauthenticated
from transval.models import Role
from transval.schemas.auth import CurrentUser
from transval.services.identity_service import IdentityService
from transval.services.token_service import TokenService

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an `Authorization: Bearer <token>` header value.

    Raises:
        Unauthenticated: header missing, wrong scheme, or empty token
    """
    if not authorization:
        raise Unauthenticated("Missing authorization header")

    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != BEARER_SCHEME or not token.strip():
        raise Unauthenticated("Authorization header must use the Bearer scheme")
    return token.strip()


async def authenticate(
    token: str,
    tokens: TokenService,
    identity: IdentityService,
) -> CurrentUser:
    """
    Stage 1: token → claims → stored user.

    Raises:
        InvalidToken / ExpiredToken: from TokenService.verify
        Unauthenticated: the claimed user no longer exists
    """
    claims = tokens.verify(token)

    user = await identity.find_by_email(claims.email)
    if user is None:
        logger.warning("Token subject %s not found in store", claims.sub)
        raise Unauthenticated("Invalid token")

    return CurrentUser(id=user.id, email=user.email, role=user.role)


def authorize(user: CurrentUser, required_roles: AbstractSet[Role]) -> CurrentUser:
    """
    Stage 2: role check. An empty `required_roles` admits any role.

    Raises:
        Forbidden: the user's role is not in `required_roles`
    """
    if required_roles and user.role not in required_roles:
        logger.warning(
            "User %s with role %s denied; requires one of %s",
            user.id,
            user.role.value,
            sorted(r.value for r in required_roles),
        )
        raise Forbidden(required_roles=sorted(r.value for r in required_roles), role=user.role.value)
    return user


async def check_access(
    token: str,
    tokens: TokenService,
    identity: IdentityService,
    required_roles: Iterable[Role] = (),
    on_authenticated: Optional[Callable[[CurrentUser], None]] = None,
) -> CurrentUser:
    """
    Authentication followed by authorization; returns the caller's identity.

    `on_authenticated` sees the caller between the stages, so a caller who
    is then refused (403) is still known to it.
    """
    user = await authenticate(token, tokens, identity)
    if on_authenticated is not None:
        on_authenticated(user)
    return authorize(user, frozenset(required_roles))
