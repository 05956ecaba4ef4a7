"""
Transaction Validation API — Identity Service
==============================================

What:  User lifecycle: registration and credential validation.
Who:   Called by the /users and /auth routes, and by the access control gate
       to resolve a token's subject.

Password hash boundary:
    `register()` returns a UserResponse, which has no hash field.
    `find_by_email()` and `validate_credentials()` return the ORM record
    (hash included) and are for in-process callers only; no route returns
    their result directly.
"""

import logging
from typing import Optional

from transval.exceptions import DuplicateIdentity, Unauthenticated, UniqueViolation
from transval.models import Role, User
from transval.repositories import UserRepository
from transval.schemas.user import UserResponse
from transval.services.password_hasher import PasswordHasher

logger = logging.getLogger(__name__)


class IdentityService:
    """
    Registration and credential checks over a UserRepository.

    Error Handling Strategy:
        UniqueViolation from the repository becomes DuplicateIdentity (409).
        StoreFailure propagates untouched (500).
    """

    def __init__(self, users: UserRepository, hasher: PasswordHasher):
        self._users = users
        self._hasher = hasher

    async def register(
        self,
        email: str,
        password: str,
        role: Optional[Role] = None,
    ) -> UserResponse:
        """
        Hash the password and insert a new user.

        Args:
            email: Login identifier, stored exactly as given
            password: Plaintext password (already checked for presence)
            role: USER or ADMIN; None means USER

        Returns:
            The created user without the password hash

        Raises:
            DuplicateIdentity: a user with this email already exists
            StoreFailure: the insert failed for any other reason
        """
        password_hash = await self._hasher.hash_async(password)
        user_role = role or Role.USER

        try:
            user = await self._users.create(
                email=email,
                password_hash=password_hash,
                role=user_role,
            )
        except UniqueViolation as e:
            if e.field != "email":
                raise
            logger.info("Registration rejected: email already registered")
            raise DuplicateIdentity() from e

        logger.info("User registered: %s (role=%s)", user.id, user.role.value)
        return UserResponse.model_validate(user)

    async def find_by_email(self, email: str) -> Optional[User]:
        """Exact-match lookup. Returns the full record, hash included."""
        return await self._users.find_by_email(email)

    async def validate_credentials(self, email: str, password: str) -> Optional[User]:
        """
        Check an email/password pair.

        Returns the user on a match and None otherwise. An unknown email and a
        wrong password both return None, so callers cannot tell them apart.

        TODO: an unknown email skips the bcrypt verify and answers faster than
        a wrong password; verifying against a dummy hash would close that
        timing side channel.
        """
        user = await self._users.find_by_email(email)
        if user is None:
            return None
        if not await self._hasher.verify_async(password, user.password_hash):
            return None
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """
        Login path: like validate_credentials, but a miss raises.

        Raises:
            Unauthenticated: unknown email or wrong password (same message)
        """
        user = await self.validate_credentials(email, password)
        if user is None:
            logger.info("Login failed: invalid credentials")
            raise Unauthenticated("Invalid email or password")
        logger.info("Login succeeded: %s", user.id)
        return user
