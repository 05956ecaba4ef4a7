"""
Pydantic request/response schemas.

Kept separate from the SQLAlchemy models so the API contract controls exactly
which fields leave the service.
"""
