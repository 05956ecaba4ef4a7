"""
Transaction Validation API — Shared Schemas
============================================

What:  Error/health response models and field types reused across resources.
"""

from datetime import datetime

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field


def check_email_syntax(value: str) -> str:
    """
    Validates email syntax and returns the value UNCHANGED.

    Why not EmailStr: EmailStr returns the normalized address (lowercased
    domain). Emails here are stored and compared exactly as submitted, so
    normalization would make two spellings of one address collide or miss.
    """
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValueError(f"email must be an email: {e}") from e
    return value


class ErrorResponse(BaseModel):
    """
    What:  Error body returned by every global exception handler.

    Example:
        {
            "statusCode": 409,
            "timestamp": "2024-01-15T12:00:00.000000+00:00",
            "path": "/users/register",
            "error": "Email already exists"
        }

    5xx bodies always carry the generic "Internal Server Error" in `error`.
    """
    statusCode: int = Field(description="HTTP status code")
    timestamp: datetime = Field(description="When the error was produced (UTC)")
    path: str = Field(description="Request path that failed")
    error: str = Field(description="Human-readable error description")


class HealthResponse(BaseModel):
    """Returned by GET /health for load balancers and container probes."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
