"""
Transaction Validation API — Routes Package
============================================

Route Inventory:
    - users.py:         POST  /users/register
    - auth.py:          POST  /auth/login
    - transactions.py:  POST  /transactions/create
                        GET   /transactions
                        GET   /transactions/pending        (ADMIN)
                        PATCH /transactions/{id}/status    (ADMIN)
    - health.py:        GET   /health

Routes stay THIN: parse the body, pick the guard, call one service method.
"""
