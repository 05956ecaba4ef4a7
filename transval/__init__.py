"""
Transaction Validation API — Application Package Initializer
=============================================================

What: Marks the `transval` directory as a Python package.
Why:  Enables module imports like `from transval.config import Settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The service follows the same layered split as the rest of our backends:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Access Control Gate (dependencies)│  ← token verify, role check
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← identity, tokens, ledger
    ├─────────────────────────────────────┤
    │     Repositories (Data Access)      │  ← one narrow interface per entity
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Services never touch the HTTP request and never read global settings.
    Everything they need (signing secret, bcrypt cost, repositories) is
    handed to their constructors by the composition root in `main.py`.
"""

__version__ = "1.0.0"
