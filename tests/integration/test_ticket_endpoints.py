"""Integration tests for support ticket endpoints."""

from uuid import uuid4

import pytest
from fastapi import status


def _ticket_body(user_id, **overrides):
    body = {
        "user_id": str(user_id),
        "subject": "Car not at pickup point",
        "description": "The Corolla was not at the Airport branch at 10:00.",
    }
    body.update(overrides)
    return body


async def _open_ticket(client, headers, user_id, **overrides) -> dict:
    response = await client.post("/api/v1/tickets", json=_ticket_body(user_id, **overrides), headers=headers)
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


class TestOpenTicket:
    """POST /api/v1/tickets"""

    @pytest.mark.asyncio
    async def test_customer_opens_own_ticket(self, client, customer_user, customer_headers):
        ticket = await _open_ticket(client, customer_headers, customer_user.id)

        assert ticket["user_id"] == str(customer_user.id)
        assert ticket["status"] == "Open"
        assert ticket["assigned_admin_id"] is None

    @pytest.mark.asyncio
    async def test_customer_cannot_open_for_someone_else(
        self, client, customer_headers, other_customer
    ):
        response = await client.post(
            "/api/v1/tickets", json=_ticket_body(other_customer.id), headers=customer_headers
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.asyncio
    async def test_unknown_user_is_404(self, client, admin_headers):
        response = await client.post("/api/v1/tickets", json=_ticket_body(uuid4()), headers=admin_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_requires_token(self, client, customer_user):
        response = await client.post("/api/v1/tickets", json=_ticket_body(customer_user.id))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_empty_subject_is_400(self, client, customer_user, customer_headers):
        response = await client.post(
            "/api/v1/tickets", json=_ticket_body(customer_user.id, subject=""), headers=customer_headers
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["errors"][0]["field"] == "subject"


class TestReadTickets:
    @pytest.mark.asyncio
    async def test_customers_only_see_their_own(
        self, client, customer_user, customer_headers, other_customer, token_factory, admin_headers
    ):
        mine = await _open_ticket(client, customer_headers, customer_user.id)
        other_headers = {"Authorization": f"Bearer {token_factory(other_customer)}"}
        theirs = await _open_ticket(client, other_headers, other_customer.id)

        listed = await client.get("/api/v1/tickets", headers=customer_headers)
        assert listed.status_code == status.HTTP_200_OK
        assert [t["id"] for t in listed.json()] == [mine["id"]]
        assert listed.json()[0]["user"]["email"] == "carol@example.com"

        hidden = await client.get(f"/api/v1/tickets/{theirs['id']}", headers=customer_headers)
        assert hidden.status_code == status.HTTP_404_NOT_FOUND

        admin_view = await client.get("/api/v1/tickets", headers=admin_headers)
        assert {t["id"] for t in admin_view.json()} == {mine["id"], theirs["id"]}

    @pytest.mark.asyncio
    async def test_admin_listing(self, client, customer_user, customer_headers, admin_headers):
        ticket = await _open_ticket(client, customer_headers, customer_user.id)

        response = await client.get("/api/v1/admin/tickets", headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        assert [t["id"] for t in response.json()] == [ticket["id"]]

        forbidden = await client.get("/api/v1/admin/tickets", headers=customer_headers)
        assert forbidden.status_code == status.HTTP_403_FORBIDDEN


class TestUpdateTicket:
    @pytest.mark.asyncio
    async def test_owner_edits_description(self, client, customer_user, customer_headers):
        ticket = await _open_ticket(client, customer_headers, customer_user.id)

        response = await client.put(
            f"/api/v1/tickets/{ticket['id']}",
            json={"description": "Found it at gate B."},
            headers=customer_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["description"] == "Found it at gate B."
        assert response.json()["subject"] == ticket["subject"]

    @pytest.mark.asyncio
    async def test_owner_cannot_change_status(self, client, customer_user, customer_headers):
        ticket = await _open_ticket(client, customer_headers, customer_user.id)

        response = await client.put(
            f"/api/v1/tickets/{ticket['id']}", json={"status": "Closed"}, headers=customer_headers
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.asyncio
    async def test_admin_assigns_and_resolves(
        self, client, customer_user, customer_headers, admin_user, admin_headers
    ):
        ticket = await _open_ticket(client, customer_headers, customer_user.id)

        response = await client.put(
            f"/api/v1/tickets/{ticket['id']}",
            json={"status": "in_progress", "assigned_admin_id": str(admin_user.id)},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "In Progress"
        assert response.json()["assigned_admin_id"] == str(admin_user.id)

    @pytest.mark.asyncio
    async def test_assignee_must_be_admin(
        self, client, customer_user, customer_headers, other_customer, admin_headers
    ):
        ticket = await _open_ticket(client, customer_headers, customer_user.id)

        response = await client.put(
            f"/api/v1/tickets/{ticket['id']}",
            json={"assigned_admin_id": str(other_customer.id)},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_unknown_status_is_400(self, client, customer_user, customer_headers, admin_headers):
        ticket = await _open_ticket(client, customer_headers, customer_user.id)

        response = await client.put(
            f"/api/v1/tickets/{ticket['id']}", json={"status": "Lost"}, headers=admin_headers
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestDeleteTicket:
    @pytest.mark.asyncio
    async def test_admin_deletes(self, client, customer_user, customer_headers, admin_headers):
        ticket = await _open_ticket(client, customer_headers, customer_user.id)

        forbidden = await client.delete(f"/api/v1/tickets/{ticket['id']}", headers=customer_headers)
        assert forbidden.status_code == status.HTTP_403_FORBIDDEN

        deleted = await client.delete(f"/api/v1/tickets/{ticket['id']}", headers=admin_headers)
        assert deleted.status_code == status.HTTP_204_NO_CONTENT

        missing = await client.get(f"/api/v1/tickets/{ticket['id']}", headers=admin_headers)
        assert missing.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_user_with_tickets_cannot_be_deleted(
        self, client, customer_user, customer_headers, admin_headers
    ):
        user_id = str(customer_user.id)
        await _open_ticket(client, customer_headers, user_id)

        response = await client.delete(f"/api/v1/users/{user_id}", headers=admin_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "User has support tickets and cannot be deleted"
