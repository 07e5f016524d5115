"""
Integration tests for the contact and RSVP email endpoints.
"""
import pytest
from httpx import AsyncClient

from app.core.errors import EmailDeliveryError


@pytest.mark.integration
@pytest.mark.asyncio
class TestContactEndpoints:
    async def test_send_contact_email(self, client: AsyncClient, email_sender):
        response = await client.post(
            "/contact/send-email",
            json={"name": "Lerato", "email": "lerato@example.com", "subject": "Parking", "message": "Is there parking?"},
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Email sent successfully!"}
        assert email_sender.sent[0].reply_to == "lerato@example.com"

    async def test_contact_email_failure(self, client: AsyncClient, email_sender):
        email_sender.failures.append(EmailDeliveryError("smtp down", transient=True))

        response = await client.post(
            "/contact/send-email",
            json={"name": "Lerato", "email": "lerato@example.com", "subject": "Parking", "message": "Hi"},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to send email"}

    async def test_send_rsvp_emails(self, client: AsyncClient, email_sender, test_user, test_event):
        body = {"userId": test_user.id, "eventId": test_event.id}

        confirm = await client.post("/contact/send-rsvp-email", json=body)
        cancel = await client.post("/contact/send-rsvp-cancel-email", json=body)

        assert confirm.status_code == 200
        assert cancel.status_code == 200
        assert [m.subject for m in email_sender.sent] == [
            "RSVP Confirmation: Jazz Night",
            "RSVP Cancellation: Jazz Night",
        ]

    async def test_rsvp_email_unknown_user(self, client: AsyncClient, email_sender, test_event):
        response = await client.post("/contact/send-rsvp-email", json={"userId": "ghost", "eventId": test_event.id})

        assert response.status_code == 404
        assert email_sender.sent == []
