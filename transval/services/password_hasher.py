"""
Transaction Validation API — Password Hasher
=============================================

What:  One-way salted password hashing and constant-time verification.
How:   passlib CryptContext with the bcrypt scheme at a fixed cost factor.
Who:   Owned by IdentityService; nothing else sees plaintext passwords.

Event loop note:
    bcrypt at cost 10 takes tens of milliseconds of pure CPU. The async
    helpers push that work onto anyio worker threads so one login does not
    stall every other request on the loop, and concurrent registrations hash
    in parallel instead of in series.
"""

import logging

import anyio
from passlib.context import CryptContext

logger = logging.getLogger(__name__)

DEFAULT_BCRYPT_ROUNDS = 10


class PasswordHasher:
    """bcrypt hash/verify with a work factor fixed at construction."""

    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS):
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, plaintext: str) -> str:
        """Returns a bcrypt hash with a fresh random salt."""
        return self._context.hash(plaintext)

    def verify(self, plaintext: str, stored_hash: str) -> bool:
        """
        Constant-time comparison of `plaintext` against `stored_hash`.

        A stored value passlib cannot identify as a bcrypt hash verifies as
        False rather than raising; the caller only ever learns "no match".
        """
        try:
            return self._context.verify(plaintext, stored_hash)
        except ValueError:
            logger.warning("Stored password hash is not a recognized bcrypt hash")
            return False

    async def hash_async(self, plaintext: str) -> str:
        return await anyio.to_thread.run_sync(self.hash, plaintext)

    async def verify_async(self, plaintext: str, stored_hash: str) -> bool:
        return await anyio.to_thread.run_sync(self.verify, plaintext, stored_hash)
