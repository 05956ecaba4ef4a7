"""
Transaction Validation API — Middleware Package
================================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Access Log] → Route Handler

    1. Request ID: accept a safe client ID or mint one, for log correlation
    2. Access Log: method, path, status, duration, request ID and the caller
       the access control gate resolved (user id and role)

Authentication is NOT middleware here: only some routes need it, and each
declares its required roles through a dependency (see transval.dependencies).
"""
