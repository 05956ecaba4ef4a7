"""
Transaction Validation API — Custom Exception Hierarchy
========================================================

What:  Typed application errors raised by services and the access control gate.
Why:   Services stay free of HTTP details; the boundary maps each type to a status.
How:   Each exception carries a client-safe message and an optional context dict
       that is logged but never returned. Handlers live in `transval.main`.

Exception Hierarchy:
    TransvalError (base)
    ├── ValidationFailed          → 400 Bad Request
    ├── InvalidStateTransition    → 400 Bad Request (transaction already decided)
    ├── DuplicateIdentity         → 409 Conflict
    ├── Unauthenticated           → 401 Unauthorized
    │   └── InvalidToken
    │       └── ExpiredToken
    ├── Forbidden                 → 403 Forbidden
    ├── NotFound                  → 404 Not Found
    └── StoreFailure              → 500 Internal Server Error
        └── UniqueViolation
"""

from typing import Any, Dict, Optional


class TransvalError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  Client-facing description (safe to return in an API response)
        context:  Debug info (logged server-side, NOT returned to the client)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationFailed(TransvalError):
    """
    Raised when input is malformed or out of range.

    Request bodies are validated by Pydantic first; this covers the checks
    services repeat for callers that bypass the HTTP layer.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class InvalidStateTransition(TransvalError):
    """
    Raised when a transaction that already left PENDING is decided again.

    HTTP: 400 Bad Request, whatever status the second call asks for.
    """

    status_code = 400

    def __init__(
        self,
        transaction_id: Optional[str] = None,
        current_status: Optional[str] = None,
        message: str = "Transaction is already approved or rejected",
    ):
        ctx: Dict[str, Any] = {}
        if transaction_id:
            ctx["transaction_id"] = transaction_id
        if current_status:
            ctx["current_status"] = current_status
        super().__init__(message=message, context=ctx)
        self.current_status = current_status


class DuplicateIdentity(TransvalError):
    """Raised when registering an email that already belongs to a user."""

    status_code = 409

    def __init__(self, message: str = "Email already exists"):
        super().__init__(message=message)


class Unauthenticated(TransvalError):
    """
    Missing, invalid, or expired credentials, or a token whose subject no
    longer exists.

    The message never says which factor failed.
    """

    status_code = 401

    def __init__(
        self,
        message: str = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidToken(Unauthenticated):
    """Bearer token failed signature, structure, or claim checks."""

    def __init__(
        self,
        message: str = "Invalid token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ExpiredToken(InvalidToken):
    """Bearer token is well-formed and signed, but past its `exp`."""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message=message)


class Forbidden(TransvalError):
    """Authenticated caller whose role is not allowed to perform the action."""

    status_code = 403

    def __init__(
        self,
        required_roles: Optional[list] = None,
        role: Optional[str] = None,
        message: str = "Forbidden resource",
    ):
        ctx: Dict[str, Any] = {}
        if required_roles:
            ctx["required_roles"] = [str(r) for r in required_roles]
        if role:
            ctx["role"] = str(role)
        super().__init__(message=message, context=ctx)


class NotFound(TransvalError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that None into
    this exception so routes never branch on it.
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource.capitalize()} with ID {resource_id} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class StoreFailure(TransvalError):
    """
    Raised when the credential store fails unexpectedly.

    Security Note:
        The client only ever sees "Internal Server Error". Driver messages,
        constraint names and SQL stay in the server log.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UniqueViolation(StoreFailure):
    """
    The store rejected a write because it would break a uniqueness constraint.

    Repositories raise it; services that know which business rule the
    constraint encodes translate it (e.g. email → DuplicateIdentity).
    """

    def __init__(self, field: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["field"] = field
        super().__init__(message=f"Unique constraint violated on '{field}'", context=ctx)
        self.field = field
