"""
Transaction Validation API — HTTP Endpoint Tests
=================================================

What:  Drives the full app (routes, guards, services, SQLite store) over HTTP.

What we test:
    ✅ Register → login → create → list → admin approve, end to end
    ✅ Deciding twice → 400, unknown id → 404, malformed id → 400
    ✅ Missing / bad token → 401, USER on admin route → 403
    ✅ Duplicate email → 409; malformed bodies → 400
    ✅ Error bodies: {statusCode, timestamp, path, error}; 5xx never leak details
    ✅ No response ever contains a password hash
"""

import uuid

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from transval.exceptions import StoreFailure
from transval.main import register_exception_handlers


async def register(client, email, password="password123", role=None):
    body = {"email": email, "password": password}
    if role:
        body["role"] = role
    return await client.post("/users/register", json=body)


async def login(client, email, password="password123") -> dict:
    response = await client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


async def user_and_admin(client):
    await register(client, "user@example.com")
    await register(client, "admin@example.com", role="ADMIN")
    return await login(client, "user@example.com"), await login(client, "admin@example.com")


def assert_error_body(response, status_code, path):
    body = response.json()
    assert set(body) == {"statusCode", "timestamp", "path", "error"}
    assert body["statusCode"] == status_code
    assert body["path"] == path
    return body


class TestRegistration:

    @pytest.mark.asyncio
    async def test_register_user(self, test_client):
        response = await register(test_client, "alice@example.com")

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "alice@example.com"
        assert body["role"] == "USER"
        uuid.UUID(body["id"])
        assert "password" not in response.text
        assert "password_hash" not in body

    @pytest.mark.asyncio
    async def test_register_admin(self, test_client):
        response = await register(test_client, "root@example.com", role="ADMIN")
        assert response.status_code == 201
        assert response.json()["role"] == "ADMIN"

    @pytest.mark.asyncio
    async def test_duplicate_email(self, test_client):
        await register(test_client, "alice@example.com")
        response = await register(test_client, "alice@example.com", password="different")

        assert response.status_code == 409
        body = assert_error_body(response, 409, "/users/register")
        assert body["error"] == "Email already exists"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"email": "not-an-email", "password": "password123"},
            {"email": "alice@example.com"},
            {"email": "alice@example.com", "password": ""},
            {"email": "alice@example.com", "password": "password123", "role": "SUPERUSER"},
            {"email": "alice@example.com", "password": "password123", "nickname": "al"},
        ],
    )
    async def test_invalid_bodies(self, test_client, body):
        response = await test_client.post("/users/register", json=body)
        assert response.status_code == 400
        assert_error_body(response, 400, "/users/register")


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_returns_token(self, test_client):
        await register(test_client, "alice@example.com")
        response = await test_client.post(
            "/auth/login", json={"email": "alice@example.com", "password": "password123"}
        )

        assert response.status_code == 200
        assert set(response.json()) == {"access_token"}

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_look_the_same(self, test_client):
        await register(test_client, "alice@example.com")

        wrong = await test_client.post(
            "/auth/login", json={"email": "alice@example.com", "password": "nope"}
        )
        unknown = await test_client.post(
            "/auth/login", json={"email": "bob@example.com", "password": "password123"}
        )

        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json()["error"] == unknown.json()["error"]


class TestTransactionFlow:

    @pytest.mark.asyncio
    async def test_full_scenario(self, test_client):
        user_headers, admin_headers = await user_and_admin(test_client)

        created = await test_client.post(
            "/transactions/create", json={"amount": 100.5}, headers=user_headers
        )
        assert created.status_code == 201
        tx = created.json()
        assert tx["amount"] == 100.5
        assert tx["status"] == "PENDING"

        mine = await test_client.get("/transactions", headers=user_headers)
        assert mine.status_code == 200
        assert [t["id"] for t in mine.json()] == [tx["id"]]

        forbidden = await test_client.get("/transactions/pending", headers=user_headers)
        assert forbidden.status_code == 403
        assert assert_error_body(forbidden, 403, "/transactions/pending")["error"] == "Forbidden resource"

        pending = await test_client.get("/transactions/pending", headers=admin_headers)
        assert pending.status_code == 200
        assert [t["id"] for t in pending.json()] == [tx["id"]]

        path = f"/transactions/{tx['id']}/status"
        approved = await test_client.patch(path, json={"status": "APPROVED"}, headers=admin_headers)
        assert approved.status_code == 200
        assert approved.json()["status"] == "APPROVED"

        again = await test_client.patch(path, json={"status": "REJECTED"}, headers=admin_headers)
        assert again.status_code == 400
        assert assert_error_body(again, 400, path)["error"] == "Transaction is already approved or rejected"

        pending = await test_client.get("/transactions/pending", headers=admin_headers)
        assert pending.json() == []

        mine = await test_client.get("/transactions", headers=user_headers)
        assert mine.json()[0]["status"] == "APPROVED"

    @pytest.mark.asyncio
    async def test_user_cannot_decide(self, test_client):
        user_headers, _ = await user_and_admin(test_client)
        tx = (await test_client.post(
            "/transactions/create", json={"amount": 5}, headers=user_headers
        )).json()

        response = await test_client.patch(
            f"/transactions/{tx['id']}/status", json={"status": "APPROVED"}, headers=user_headers
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_sees_only_own_transactions_in_listing(self, test_client):
        user_headers, admin_headers = await user_and_admin(test_client)
        await test_client.post("/transactions/create", json={"amount": 5}, headers=user_headers)

        response = await test_client.get("/transactions", headers=admin_headers)
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_unknown_transaction(self, test_client):
        _, admin_headers = await user_and_admin(test_client)
        missing = uuid.uuid4()

        response = await test_client.patch(
            f"/transactions/{missing}/status", json={"status": "APPROVED"}, headers=admin_headers
        )
        assert response.status_code == 404
        assert str(missing) in response.json()["error"]

    @pytest.mark.asyncio
    async def test_malformed_transaction_id(self, test_client):
        _, admin_headers = await user_and_admin(test_client)
        response = await test_client.patch(
            "/transactions/not-a-uuid/status", json={"status": "APPROVED"}, headers=admin_headers
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["PENDING", "approved", "CANCELLED", None])
    async def test_invalid_decision_status(self, test_client, status):
        user_headers, admin_headers = await user_and_admin(test_client)
        tx = (await test_client.post(
            "/transactions/create", json={"amount": 5}, headers=user_headers
        )).json()

        response = await test_client.patch(
            f"/transactions/{tx['id']}/status", json={"status": status}, headers=admin_headers
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [0.001, 100.555, 0.1 + 0.2, 1e17, 12345678901234567])
    async def test_any_positive_amount_accepted(self, test_client, amount):
        user_headers, _ = await user_and_admin(test_client)

        response = await test_client.post(
            "/transactions/create", json={"amount": amount}, headers=user_headers
        )

        assert response.status_code == 201, response.text
        assert response.json()["amount"] == pytest.approx(amount)
        assert response.json()["status"] == "PENDING"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [0, -10, "100", True, None])
    async def test_invalid_amounts(self, test_client, amount):
        user_headers, _ = await user_and_admin(test_client)
        response = await test_client.post(
            "/transactions/create", json={"amount": amount}, headers=user_headers
        )
        assert response.status_code == 400
        assert_error_body(response, 400, "/transactions/create")

        mine = await test_client.get("/transactions", headers=user_headers)
        assert mine.json() == []


class TestAuthenticationErrors:

    @pytest.mark.asyncio
    async def test_missing_token(self, test_client):
        response = await test_client.get("/transactions")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert_error_body(response, 401, "/transactions")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header", ["Bearer not-a-token", "Basic dXNlcjpwYXNz", "Bearer"])
    async def test_bad_authorization_header(self, test_client, header):
        response = await test_client.get("/transactions", headers={"Authorization": header})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_bad_token_on_admin_route_is_401_not_403(self, test_client):
        response = await test_client.get(
            "/transactions/pending", headers={"Authorization": "Bearer garbage"}
        )
        assert response.status_code == 401


class TestPlumbing:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["database"] == "connected"

    @pytest.mark.asyncio
    async def test_unknown_route_uses_error_body(self, test_client):
        response = await test_client.get("/nope")
        assert response.status_code == 404
        assert_error_body(response, 404, "/nope")

    @pytest.mark.asyncio
    async def test_store_failure_hides_details(self):
        app = FastAPI()
        register_exception_handlers(app)

        @app.get("/boom")
        async def boom():
            raise StoreFailure(message="relation users does not exist", context={"sql": "SELECT"})

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/boom")

        assert response.status_code == 500
        body = assert_error_body(response, 500, "/boom")
        assert body["error"] == "Internal Server Error"
        assert "relation" not in response.text
