"""
Tests for authentication: password hashing, session cookie, auth endpoints.
"""

import time

import jwt
import pytest
from fastapi.testclient import TestClient

from rest_api.main import create_app
from shared.config.settings import Settings
from shared.infrastructure.db import get_db
from shared.security.auth import SessionTokenCodec
from shared.security.password import hash_password, verify_password
from shared.security.rate_limit import limiter
from shared.utils.exceptions import AuthenticationError

from conftest import OWNER_EMAIL, OWNER_PASSWORD, login_as


class TestPasswordHashing:
    """Test password hashing utilities."""

    def test_hash_password_returns_bcrypt_hash(self):
        hashed = hash_password("mypassword")
        assert hashed.startswith("$2b$")

    def test_verify_password_correct(self):
        hashed = hash_password("mypassword")
        assert verify_password("mypassword", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = hash_password("mypassword")
        assert verify_password("wrongpassword", hashed) is False

    def test_plain_text_never_verifies(self):
        assert verify_password("plaintext", "plaintext") is False


class TestSessionTokenCodec:
    """The codec only trusts tokens signed with its own configuration."""

    def test_round_trip(self, test_settings):
        codec = SessionTokenCodec(test_settings)
        claims = codec.verify(codec.sign(42, "chef@test.com"))
        assert claims["user_id"] == 42
        assert claims["email"] == "chef@test.com"

    def test_token_from_other_secret_is_rejected(self, test_settings):
        other = SessionTokenCodec(
            Settings(jwt_secret="a-completely-different-secret-0123456789abcdef")
        )
        token = other.sign(42, "chef@test.com")
        with pytest.raises(AuthenticationError):
            SessionTokenCodec(test_settings).verify(token)

    def test_expired_token_is_rejected(self, test_settings):
        now = int(time.time())
        token = jwt.encode(
            {
                "sub": "42",
                "iss": test_settings.jwt_issuer,
                "aud": test_settings.jwt_audience,
                "iat": now - 100,
                "exp": now - 10,
            },
            test_settings.jwt_secret,
            algorithm="HS256",
        )
        with pytest.raises(AuthenticationError) as exc_info:
            SessionTokenCodec(test_settings).verify(token)
        assert exc_info.value.detail == "Session expired"

    def test_ttl_is_ninety_days(self, test_settings):
        assert SessionTokenCodec(test_settings).ttl_seconds == 90 * 24 * 60 * 60


class TestAuthEndpoints:
    """Test authentication API endpoints."""

    def test_register_sets_cookie(self, client):
        response = client.post(
            "/api/auth/register",
            json={"email": "New@Test.com", "password": "12345"},
        )
        assert response.status_code == 201
        assert response.json()["email"] == "new@test.com"
        assert "auth_token" in response.cookies
        assert "httponly" in response.headers["set-cookie"].lower()

        session = client.get("/api/auth/session")
        assert session.status_code == 200
        assert session.json()["user"]["email"] == "new@test.com"
        assert session.json()["establishment_id"] is None

    def test_register_duplicate_email(self, client, owner):
        response = client.post(
            "/api/auth/register",
            json={"email": OWNER_EMAIL, "password": "another"},
        )
        assert response.status_code == 409
        assert "already exists" in response.json()["error"]

    def test_register_short_password(self, client):
        response = client.post(
            "/api/auth/register",
            json={"email": "short@test.com", "password": "1234"},
        )
        assert response.status_code == 400
        assert "password" in response.json()["error"]

    def test_login_success(self, client, owner):
        response = client.post(
            "/api/auth/login",
            json={"email": OWNER_EMAIL, "password": OWNER_PASSWORD},
        )
        assert response.status_code == 200
        assert response.json()["email"] == OWNER_EMAIL
        assert "auth_token" in response.cookies

    @pytest.mark.parametrize(
        "email,password",
        [("nobody@test.com", OWNER_PASSWORD), (OWNER_EMAIL, "wrongpassword")],
    )
    def test_login_invalid_credentials(self, client, owner, email, password):
        response = client.post("/api/auth/login", json={"email": email, "password": password})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid email or password"}

    def test_session_requires_cookie(self, client):
        response = client.get("/api/auth/session")
        assert response.status_code == 401
        assert response.json() == {"error": "Not authenticated"}

    def test_session_with_garbage_cookie(self, client):
        client.cookies.set("auth_token", "not-a-jwt")
        response = client.get("/api/auth/session")
        assert response.status_code == 401

    def test_session_reports_establishment(self, auth_client, establishment):
        response = auth_client.get("/api/auth/session")
        assert response.status_code == 200
        assert response.json()["establishment_id"] == establishment.id

    def test_logout_clears_cookie(self, auth_client):
        response = auth_client.post("/api/auth/logout")
        assert response.status_code == 200
        assert 'auth_token=""' in response.headers["set-cookie"] or "Max-Age=0" in response.headers["set-cookie"]

    def test_admin_endpoint_without_establishment(self, client, app, owner):
        login_as(client, app, owner)
        response = client.get("/api/categories")
        assert response.status_code == 404
        assert "Establishment" in response.json()["error"]


class TestLoginRateLimit:
    """The limiter follows the settings the app was built with."""

    def _attempt_logins(self, client, count):
        return [
            client.post("/api/auth/login", json={"email": OWNER_EMAIL, "password": "wrong"}).status_code
            for _ in range(count)
        ]

    def test_disabled_by_settings(self, client, owner):
        assert self._attempt_logins(client, 7) == [401] * 7

    def test_enabled_by_settings(self, test_settings, db_session, owner):
        application = create_app(test_settings.model_copy(update={"rate_limit_enabled": True}))
        application.dependency_overrides[get_db] = lambda: db_session
        limiter.reset()

        with TestClient(application) as client:
            codes = self._attempt_logins(client, 6)
            blocked = client.post("/api/auth/login", json={"email": OWNER_EMAIL, "password": "wrong"})

        assert codes[:5] == [401] * 5
        assert codes[5] == 429
        assert blocked.json()["error"].startswith("Too many requests")
        limiter.reset()
