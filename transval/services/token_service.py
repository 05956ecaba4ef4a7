"""
Transaction Validation API — Token Service
===========================================

What:  Issues and verifies signed, time-limited bearer tokens (HS256 JWT).
Who:   The login route issues; the access control gate verifies.

Token layout:
    header:  {"alg": "HS256", "typ": "JWT"}
    payload: {"sub": "<user uuid>", "email": "<email>", "iat": <unix>, "exp": <unix>}

`verify()` checks signature, structure, required claims and expiry. It does
NOT check that the subject still exists; that is the gate's job, so a user
removed after issuance is rejected there rather than here.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt
from pydantic import ValidationError

from transval.exceptions import ExpiredToken, InvalidToken
from transval.models import User
from transval.schemas.auth import TokenClaims

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
DEFAULT_EXPIRES_MINUTES = 60
REQUIRED_CLAIMS = ["sub", "email", "iat", "exp"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """
    HS256 token issuance and verification with an injected secret.

    Args:
        secret: Process-wide signing secret (from Settings.jwt_secret)
        expires_minutes: Token lifetime
        clock: Returns "now" for issuance; tests pass a fixed clock to mint
               already-expired tokens
    """

    def __init__(
        self,
        secret: str,
        expires_minutes: int = DEFAULT_EXPIRES_MINUTES,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if not secret:
            raise ValueError("A signing secret must be provided")
        self._secret = secret
        self._lifetime = timedelta(minutes=expires_minutes)
        self._clock = clock or _utcnow

    def issue(self, user: User) -> str:
        issued_at = self._clock()
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self._lifetime).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> TokenClaims:
        """
        Decode and validate a bearer token.

        Raises:
            ExpiredToken: signature valid but `exp` has passed
            InvalidToken: bad signature, malformed token, missing claims
        """
        if not token:
            raise InvalidToken("Missing token")

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": REQUIRED_CLAIMS},
            )
            return TokenClaims(**payload)
        except jwt.ExpiredSignatureError:
            raise ExpiredToken()
        except jwt.InvalidTokenError as e:
            logger.debug("Token rejected: %s", type(e).__name__)
            raise InvalidToken(context={"reason": type(e).__name__})
        except ValidationError:
            raise InvalidToken(context={"reason": "malformed_claims"})
