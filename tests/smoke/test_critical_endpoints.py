"""
Smoke tests for critical endpoints.

Quick checks that the application boots and its main surfaces respond.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.smoke
@pytest.mark.asyncio
class TestCriticalEndpoints:
    """Smoke tests for critical API endpoints."""

    async def test_root(self, client: AsyncClient):
        response = await client.get("/")

        assert response.status_code == 200
        assert "message" in response.json()

    async def test_health_check(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    async def test_register_and_login(self, client: AsyncClient):
        register_response = await client.post(
            "/api/auth/register",
            json={"email": "smoke@test.com", "password": "SmokeTest123!"},
        )
        assert register_response.status_code == 201

        login_response = await client.post(
            "/api/auth/login",
            json={"email": "smoke@test.com", "password": "SmokeTest123!"},
        )
        assert login_response.status_code == 200
        assert login_response.json()["token_type"] == "bearer"

    async def test_unauthorized_access(self, client: AsyncClient):
        """Protected endpoints reject unauthorized access."""
        response = await client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json()["code"] == "unauthenticated"

    async def test_invalid_credentials(self, client: AsyncClient):
        response = await client.post(
            "/api/auth/login",
            json={"email": "nonexistent@test.com", "password": "wrong"},
        )

        assert response.status_code == 401


@pytest.mark.smoke
@pytest.mark.asyncio
class TestHealthChecks:
    """Smoke tests for application plumbing."""

    async def test_request_id_header(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/auth/me", headers=auth_headers)

        assert response.status_code == 200
        assert response.headers["X-Request-ID"]

    async def test_request_id_is_propagated(self, client: AsyncClient, auth_headers):
        response = await client.get(
            "/api/auth/me",
            headers={**auth_headers, "X-Request-ID": "smoke-123"},
        )

        assert response.headers["X-Request-ID"] == "smoke-123"

    async def test_error_shape(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/organizations/9999", headers=auth_headers)

        assert response.status_code == 404
        data = response.json()
        assert set(data) >= {"detail", "code"}

    async def test_create_and_retrieve_organization(self, client: AsyncClient, auth_headers):
        create_response = await client.post(
            "/api/organizations/",
            headers=auth_headers,
            json={"name": "Smoke Test Org", "slug": "smoke-test-org"},
        )

        assert create_response.status_code == 201
        org_id = create_response.json()["organization"]["id"]

        get_response = await client.get(f"/api/organizations/{org_id}", headers=auth_headers)

        assert get_response.status_code == 200
        assert get_response.json()["name"] == "Smoke Test Org"

    async def test_token_validation(self, client: AsyncClient, user):
        """JWT validation accepts issued tokens and rejects garbage."""
        from teamspace.core.security import create_session_token

        response = await client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {create_session_token(user)}"}
        )
        assert response.status_code == 200

        response = await client.get(
            "/api/auth/me", headers={"Authorization": "Bearer invalid_token"}
        )
        assert response.status_code == 401
