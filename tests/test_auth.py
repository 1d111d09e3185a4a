"""
Tests for authentication endpoints (register, login, set-pin).

These tests verify:
  - Registration returns the generated customer ID, profile URL and a JWT
  - Duplicate email registration is rejected (409 Conflict)
  - Login returns a token; wrong password and unknown email get the same 401
  - Malformed bodies are rejected with a single 400 message
  - The PIN must be exactly four digits and requires a token
  - Protected endpoints reject missing or bogus tokens
"""

import re


# ---------------------------------------------------------------------------
# Register Tests
# ---------------------------------------------------------------------------

class TestRegister:
    """Tests for POST /auth/register."""

    async def test_register_success(self, client):
        """A valid registration returns 201 with identifiers and a token."""
        response = await client.post(
            "/auth/register",
            json={"email": "NewUser@Example.com", "password": "StrongPass99!", "name": "Jane"},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "newuser@example.com"
        assert data["name"] == "Jane"
        assert re.fullmatch(r"CUST_[0-9A-Z]{9}", data["customer_id"])
        assert re.fullmatch(r"https://neobank\.com/user/[0-9a-z]{9}", data["public_url"])
        assert data["token"]
        assert data["token_type"] == "bearer"

    async def test_name_defaults_to_email_local_part(self, client):
        response = await client.post(
            "/auth/register",
            json={"email": "ravi.k@example.com", "password": "StrongPass99!"},
        )
        assert response.status_code == 201
        assert response.json()["name"] == "ravi.k"

    async def test_register_duplicate_email(self, client):
        """Registering an already-registered email returns 409."""
        body = {"email": "duplicate@example.com", "password": "StrongPass99!"}
        first = await client.post("/auth/register", json=body)
        assert first.status_code == 201

        second = await client.post("/auth/register", json=body)
        assert second.status_code == 409
        assert second.json()["error_type"] == "duplicate_email"

    async def test_register_short_password(self, client):
        response = await client.post(
            "/auth/register",
            json={"email": "short@example.com", "password": "short"},
        )
        assert response.status_code == 400
        data = response.json()
        assert data["error_type"] == "validation_error"
        assert data["detail"].startswith("password:")

    async def test_register_invalid_email(self, client):
        response = await client.post(
            "/auth/register",
            json={"email": "not-an-email", "password": "StrongPass99!"},
        )
        assert response.status_code == 400


# ---------------------------------------------------------------------------
# Login Tests
# ---------------------------------------------------------------------------

class TestLogin:
    """Tests for POST /auth/login."""

    async def test_login_success(self, client, make_member):
        await make_member("login@example.com")
        response = await client.post(
            "/auth/login",
            json={"email": "login@example.com", "password": "SecurePass123!"},
        )
        assert response.status_code == 200
        assert response.json()["token"]

    async def test_login_wrong_password(self, client, make_member):
        await make_member("wrongpw@example.com")
        response = await client.post(
            "/auth/login",
            json={"email": "wrongpw@example.com", "password": "WrongPassword1!"},
        )
        assert response.status_code == 401
        assert response.json()["error_type"] == "invalid_credentials"

    async def test_login_unknown_email_same_error(self, client, make_member):
        """Unknown email and wrong password are indistinguishable."""
        await make_member("known@example.com")
        wrong_pw = await client.post(
            "/auth/login",
            json={"email": "known@example.com", "password": "WrongPassword1!"},
        )
        unknown = await client.post(
            "/auth/login",
            json={"email": "nobody@example.com", "password": "WrongPassword1!"},
        )
        assert unknown.status_code == wrong_pw.status_code == 401
        assert unknown.json() == wrong_pw.json()


# ---------------------------------------------------------------------------
# PIN and token Tests
# ---------------------------------------------------------------------------

class TestSetPin:
    """Tests for POST /auth/set-pin."""

    async def test_set_pin(self, client, make_member):
        member = await make_member("pin@example.com", pin=None)
        response = await client.post("/auth/set-pin", json={"pin": "4321"}, headers=member.headers)
        assert response.status_code == 200
        assert response.json()["message"] == "PIN set successfully"

    async def test_pin_must_be_four_digits(self, client, make_member):
        member = await make_member("badpin@example.com", pin=None)
        for pin in ("123", "12345", "12a4", ""):
            response = await client.post("/auth/set-pin", json={"pin": pin}, headers=member.headers)
            assert response.status_code == 400, pin

    async def test_set_pin_requires_token(self, client):
        response = await client.post("/auth/set-pin", json={"pin": "1234"})
        assert response.status_code == 401
        assert response.json()["error_type"] == "authentication_failed"


class TestTokenValidation:
    async def test_bogus_token_rejected(self, client):
        response = await client.get("/balance", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Could not validate credentials"

    async def test_health_is_public(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
