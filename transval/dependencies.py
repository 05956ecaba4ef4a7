"""
Transaction Validation API — FastAPI Dependencies
==================================================

What:  Builds services for a request and guards routes by role.
How:   Process-wide collaborators (TokenService, PasswordHasher, session
       factory) live on `app.state`, put there by `create_app()`. Request-scoped
       ones (repositories, IdentityService, LedgerService) are built here on
       top of the request's AsyncSession.

Route guarding:
    Routes declare the roles they need explicitly:

        @router.get("/pending")
        async def list_pending(user: CurrentUser = Depends(require_admin)):
            ...

    `require_roles()` only collects inputs; the decision itself is made by
    the plain functions in `transval.services.access_control`.
"""

from typing import Awaitable, Callable, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from transval.database import get_db_session
from transval.models import Role
from transval.repositories import SqlAlchemyTransactionRepository, SqlAlchemyUserRepository
from transval.schemas.auth import CurrentUser
from transval.services import IdentityService, LedgerService, PasswordHasher, TokenService
from transval.services.access_control import check_access, extract_bearer_token


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_identity_service(
    session: AsyncSession = Depends(get_db_session),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> IdentityService:
    return IdentityService(SqlAlchemyUserRepository(session), hasher)


def get_ledger_service(session: AsyncSession = Depends(get_db_session)) -> LedgerService:
    return LedgerService(SqlAlchemyTransactionRepository(session))


def require_roles(*roles: Role) -> Callable[..., Awaitable[CurrentUser]]:
    """
    Build a dependency that authenticates the caller and checks their role.

    Args:
        roles: Roles allowed through. None given means any authenticated user.

    Returns:
        A FastAPI dependency resolving to the caller's CurrentUser.
    """
    required = frozenset(roles)

    async def dependency(
        request: Request,
        authorization: Optional[str] = Header(default=None),
        tokens: TokenService = Depends(get_token_service),
        identity: IdentityService = Depends(get_identity_service),
    ) -> CurrentUser:
        token = extract_bearer_token(authorization)

        def remember(user: CurrentUser) -> None:
            # Read by the access log middleware once the response is ready
            request.state.current_user = user

        return await check_access(token, tokens, identity, required, on_authenticated=remember)

    return dependency


# Guards used by the routers
require_user = require_roles()
require_admin = require_roles(Role.ADMIN)
