"""Integration tests for repair confirmation emails"""

import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from storefront_gateway.domain.exceptions import EmailDeliveryError
from storefront_gateway.infrastructure.database.models import Appointment, AppointmentItem

EMAIL_CLIENT = "storefront_gateway.infrastructure.clients.mailer.EmailClient"


@pytest.fixture
def appointment(db: Session) -> Appointment:
    appointment = Appointment(
        customer_name="Ana García",
        customer_email="ana@example.com",
        appointment_date=datetime(2025, 4, 29, 14, 30, tzinfo=timezone.utc),
        device_brand="Samsung",
        device_model="Galaxy S21",
        items=[
            AppointmentItem(service_name="Screen Replacement", variant_value="Original"),
            AppointmentItem(service_name="Battery Replacement"),
        ],
    )
    db.add(appointment)
    db.commit()
    return appointment


@patch(f"{EMAIL_CLIENT}.send")
def test_send_confirmation_email(mock_send: AsyncMock, client: TestClient, appointment: Appointment):
    mock_send.return_value = "msg-1"

    response = client.post(f"/api/repair/send-confirmation-email?id={appointment.id}")

    assert response.status_code == 200
    assert response.json() == {"success": True}
    to, content = mock_send.call_args.args
    assert to == "ana@example.com"
    assert content.subject == f"Repair Appointment Confirmation #{appointment.id}"
    assert "April 29, 2025" in content.text
    assert "2:30 PM" in content.text
    assert "Samsung Galaxy S21" in content.text
    assert "- Screen Replacement (Original)" in content.text
    assert "- Battery Replacement" in content.text
    assert f"/en/repair/status?id={appointment.id}" in content.text


@patch(f"{EMAIL_CLIENT}.send")
def test_send_confirmation_email_spanish(mock_send: AsyncMock, client: TestClient, appointment: Appointment):
    response = client.post(f"/api/repair/send-confirmation-email?id={appointment.id}&locale=es")

    assert response.status_code == 200
    content = mock_send.call_args.args[1]
    assert content.subject.startswith("Confirmación de reparación")
    assert "Hola Ana García," in content.text
    assert f"/es/repair/status?id={appointment.id}" in content.text


def test_send_confirmation_email_requires_id(client: TestClient):
    response = client.post("/api/repair/send-confirmation-email")

    assert response.status_code == 400
    assert response.json() == {"error": "Appointment ID is required"}


@patch(f"{EMAIL_CLIENT}.send")
def test_send_confirmation_email_unknown_appointment(mock_send: AsyncMock, client: TestClient, db: Session):
    response = client.post("/api/repair/send-confirmation-email?id=404")

    assert response.status_code == 404
    assert response.json() == {"error": "Appointment not found"}
    mock_send.assert_not_called()


@patch(f"{EMAIL_CLIENT}.send")
def test_send_confirmation_email_delivery_failure(mock_send: AsyncMock, client: TestClient, appointment: Appointment):
    mock_send.side_effect = EmailDeliveryError("SES send_email failed: MessageRejected")

    response = client.post(f"/api/repair/send-confirmation-email?id={appointment.id}")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to send confirmation email"}


@patch(f"{EMAIL_CLIENT}.send")
def test_send_confirmation_email_lookup_failure(mock_send: AsyncMock, client: TestClient):
    with patch(
        "storefront_gateway.infrastructure.database.repositories.AppointmentRepository.get_for_email",
        side_effect=OperationalError("SELECT", {}, Exception("connection lost")),
    ):
        response = client.post("/api/repair/send-confirmation-email?id=1")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch appointment"}
    mock_send.assert_not_called()
