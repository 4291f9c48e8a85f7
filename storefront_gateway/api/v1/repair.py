"""POST /api/repair/send-confirmation-email - repair appointment confirmation"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront_gateway.api.dependencies import get_email_client, get_request_id
from storefront_gateway.api.v1.schemas import SuccessResponse
from storefront_gateway.config import settings
from storefront_gateway.domain.emails import DEFAULT_LOCALE, build_repair_confirmation, status_check_link
from storefront_gateway.domain.exceptions import EmailDeliveryError
from storefront_gateway.infrastructure.clients.mailer import EmailClient
from storefront_gateway.infrastructure.database.repositories import AppointmentRepository
from storefront_gateway.infrastructure.database.session import get_db
from storefront_gateway.infrastructure.observability.logging import log_upstream_error
from storefront_gateway.infrastructure.observability.metrics import emails_sent_counter, record_upstream_failure

router = APIRouter()


@router.post("/repair/send-confirmation-email", response_model=SuccessResponse, response_model_exclude_none=True)
async def send_confirmation_email(
    request: Request,
    id: int | None = Query(None, description="Appointment identifier"),
    locale: str = Query(DEFAULT_LOCALE),
    db: Session = Depends(get_db),
    mailer: EmailClient = Depends(get_email_client),
):
    """Email the customer a confirmation with a link to track the repair"""
    request_id = get_request_id(request)

    if id is None:
        raise HTTPException(status_code=400, detail="Appointment ID is required")

    try:
        appointment = AppointmentRepository(db).get_for_email(id)
    except SQLAlchemyError as e:
        db.rollback()
        record_upstream_failure("database")
        logging.error(f"Error fetching appointment: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Failed to fetch appointment")
    if appointment is None:
        raise HTTPException(status_code=404, detail="Appointment not found")

    content = build_repair_confirmation(
        appointment,
        status_check_link(settings.base_url, locale, appointment.id),
        locale,
    )

    try:
        await mailer.send(appointment.customer_email, content)
    except EmailDeliveryError as e:
        record_upstream_failure("ses")
        log_upstream_error(request_id, "ses", e)
        raise HTTPException(status_code=500, detail="Failed to send confirmation email")

    emails_sent_counter.labels(template="repair_confirmation").inc()
    logging.info(
        "Repair confirmation sent",
        extra={"request_id": request_id, "appointment_id": appointment.id, "locale": locale},
    )
    return SuccessResponse()
