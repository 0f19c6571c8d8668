"""
End-to-end test for the complete onboarding flow.

Tests the full journey from registration to joining an organization by invitation.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.e2e
@pytest.mark.asyncio
class TestUserRegistrationFlow:
    """Complete registration, organization setup and invitation flow."""

    async def test_complete_onboarding_flow(self, client: AsyncClient, notification_sender):
        """
        Test complete onboarding flow:
        1. Register Alice and log in
        2. Alice creates Acme
        3. Alice invites Bob
        4. Bob registers, logs in and accepts
        5. Verify membership from both sides
        """
        # Step 1: Register and log in
        register_response = await client.post(
            "/api/auth/register",
            json={"email": "alice@acme.com", "password": "AlicePass123!", "display_name": "Alice"},
        )
        assert register_response.status_code == 201
        assert register_response.json()["user"]["email"] == "alice@acme.com"

        login_response = await client.post(
            "/api/auth/login",
            json={"email": "alice@acme.com", "password": "AlicePass123!"},
        )
        assert login_response.status_code == 200
        alice_headers = {"Authorization": f"Bearer {login_response.json()['access_token']}"}

        # Step 2: Create organization
        org_response = await client.post(
            "/api/organizations/",
            headers=alice_headers,
            json={"name": "Acme", "slug": "acme"},
        )
        assert org_response.status_code == 201
        org_id = org_response.json()["organization"]["id"]

        # Step 3: Invite Bob
        invite_response = await client.post(
            f"/api/organizations/{org_id}/invitations",
            headers=alice_headers,
            json={"email": "bob@x.com", "role": "MEMBER"},
        )
        assert invite_response.status_code == 201
        token = invite_response.json()["invitation"]["token"]

        to, _, body = notification_sender.sent[-1]
        assert to == "bob@x.com"
        assert token in body

        # Bob can preview before signing up
        preview_response = await client.get(f"/api/invitations/token/{token}")
        assert preview_response.status_code == 200
        assert preview_response.json()["organization_name"] == "Acme"

        # Step 4: Bob registers, logs in and accepts
        register_response = await client.post(
            "/api/auth/register",
            json={"email": "bob@x.com", "password": "BobPass1234!"},
        )
        assert register_response.status_code == 201
        assert register_response.json()["user"]["display_name"] == "bob"

        login_response = await client.post(
            "/api/auth/login",
            json={"email": "bob@x.com", "password": "BobPass1234!"},
        )
        bob_headers = {"Authorization": f"Bearer {login_response.json()['access_token']}"}

        accept_response = await client.post(
            "/api/invitations/accept",
            headers=bob_headers,
            json={"token": token},
        )
        assert accept_response.status_code == 200
        assert accept_response.json()["membership"]["role"] == "MEMBER"

        # Step 5: Verify from both sides
        bob_orgs = await client.get("/api/user/organizations", headers=bob_headers)
        assert bob_orgs.json()["organizations"] == [
            {"id": org_id, "name": "Acme", "slug": "acme", "role": "MEMBER", "is_owner": False}
        ]

        members_response = await client.get(f"/api/organizations/{org_id}/members", headers=alice_headers)
        assert {m["user"]["email"] for m in members_response.json()} == {"alice@acme.com", "bob@x.com"}

        pending_response = await client.get(f"/api/organizations/{org_id}/invitations", headers=alice_headers)
        assert pending_response.json()["invitations"] == []

        # Bob is a plain member and cannot invite
        forbidden_response = await client.post(
            f"/api/organizations/{org_id}/invitations",
            headers=bob_headers,
            json={"email": "eve@x.com"},
        )
        assert forbidden_response.status_code == 403

    async def test_removed_member_loses_access(self, client: AsyncClient, organization, member_user, auth_headers, member_auth_headers):
        """Removing a member revokes access on the next request."""
        members = (await client.get(f"/api/organizations/{organization.id}/members", headers=auth_headers)).json()
        membership_id = next(m["id"] for m in members if m["user"]["id"] == member_user.id)

        assert (await client.get(f"/api/organizations/{organization.id}", headers=member_auth_headers)).status_code == 200

        remove_response = await client.delete(
            f"/api/organizations/{organization.id}/members/{membership_id}",
            headers=auth_headers,
        )
        assert remove_response.status_code == 204

        response = await client.get(f"/api/organizations/{organization.id}", headers=member_auth_headers)
        assert response.status_code == 403

        orgs = await client.get("/api/user/organizations", headers=member_auth_headers)
        assert orgs.json()["organizations"] == []
