"""
Transaction Validation API — Services Layer
============================================

What:  Business logic between routes (HTTP) and repositories (persistence).

Service Inventory:
    - PasswordHasher:  bcrypt hash/verify, offloaded to worker threads
    - IdentityService: registration and credential validation
    - TokenService:    HS256 bearer token issue/verify
    - access_control:  authentication + role authorization as plain functions
    - LedgerService:   transaction creation, listing, one-shot status decision

Services are constructed per request by `transval.dependencies` from the
request's repositories and the process-wide hasher/token service.
"""

from transval.services.identity_service import IdentityService
from transval.services.ledger_service import LedgerService
from transval.services.password_hasher import PasswordHasher
from transval.services.token_service import TokenService

__all__ = ["IdentityService", "LedgerService", "PasswordHasher", "TokenService"]
