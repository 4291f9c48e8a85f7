"""Payment, checkout, shipping payment and refund endpoints"""

import json
import logging
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront_gateway.api.dependencies import (
    get_current_principal,
    get_request_id,
    get_stripe_client,
    require_roles,
)
from storefront_gateway.api.v1.schemas import (
    CheckoutRequest,
    CheckoutResponse,
    CreateIntentRequest,
    CreateIntentResponse,
    PaymentSettingsResponse,
    PaymentSettingsSchema,
    RefundCreate,
    RefundRequestCreate,
    RefundResponse,
    ShippingPaymentRequest,
    ShippingPaymentResponse,
    SuccessResponse,
)
from storefront_gateway.config import settings
from storefront_gateway.domain.aggregation import to_cents
from storefront_gateway.domain.authorization import ADMIN_ROLES
from storefront_gateway.domain.exceptions import ConfigurationError, PaymentProviderError
from storefront_gateway.domain.models import Principal
from storefront_gateway.domain.payments import (
    can_refund,
    can_request_refund,
    cents_to_amount,
    checkout_line_items,
    classify_refund,
    has_open_refund_request,
)
from storefront_gateway.infrastructure.clients.payments import StripeClient
from storefront_gateway.infrastructure.database.repositories import (
    AppointmentRepository,
    OrderRepository,
    ProfileRepository,
    SettingsRepository,
    TransactionRepository,
)
from storefront_gateway.infrastructure.database.session import get_db
from storefront_gateway.infrastructure.observability.metrics import (
    record_payment_intent,
    record_upstream_failure,
    refund_counter,
)

router = APIRouter()


def _payment_error(request_id: str, error: Exception) -> HTTPException:
    record_upstream_failure("stripe")
    logging.error(f"Stripe payment error: {error}", extra={"request_id": request_id})
    return HTTPException(status_code=500, detail=str(error) or "Payment processing failed")


def _database_error(db: Session, request_id: str, error: Exception, detail: str) -> HTTPException:
    db.rollback()
    record_upstream_failure("database")
    logging.error(f"Database error: {error}", extra={"request_id": request_id})
    return HTTPException(status_code=500, detail=detail)


@router.get("/payment-settings", response_model=PaymentSettingsResponse)
def get_payment_settings(request: Request, db: Session = Depends(get_db)):
    """Client-safe subset of the payment settings"""
    try:
        stored = SettingsRepository(db).get("payment")
    except SQLAlchemyError as e:
        db.rollback()
        record_upstream_failure("database")
        logging.error(f"Error fetching payment settings: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Failed to retrieve payment settings")

    if stored is None:
        return PaymentSettingsResponse(
            settings=PaymentSettingsSchema(
                stripe_public_key=settings.stripe_publishable_key,
                payment_currency="eur",
            )
        )

    checkout = stored.get("enable_stripe_checkout")
    elements = stored.get("enable_stripe_elements")
    return PaymentSettingsResponse(
        settings=PaymentSettingsSchema(
            stripe_public_key=stored.get("stripe_public_key") or settings.stripe_publishable_key,
            payment_currency=stored.get("payment_currency") or "usd",
            enable_stripe_checkout=True if checkout is None else checkout,
            enable_stripe_elements=True if elements is None else elements,
        )
    )


@router.post("/payment/create-intent", response_model=CreateIntentResponse)
async def create_payment_intent(
    request_body: CreateIntentRequest,
    request: Request,
    principal: Principal = Depends(get_current_principal),
    stripe: StripeClient = Depends(get_stripe_client),
):
    """Create and confirm a payment intent for an order"""
    request_id = get_request_id(request)

    try:
        intent = await stripe.create_payment_intent(
            amount_cents=to_cents(request_body.amount),
            payment_method_id=request_body.payment_method_id,
            description=f"Order payment for {request_body.customer_id}",
            metadata=request_body.metadata,
            manual_confirmation=True,
        )
    except (PaymentProviderError, ConfigurationError) as e:
        raise _payment_error(request_id, e)

    record_payment_intent(intent.status)
    logging.info(
        "Payment intent created",
        extra={"request_id": request_id, "user_id": principal.user_id, "payment_intent_id": intent.id, "status": intent.status},
    )
    return CreateIntentResponse(client_secret=intent.client_secret, status=intent.status, id=intent.id)


@router.post("/checkout", response_model=CheckoutResponse)
async def create_checkout(
    request_body: CheckoutRequest,
    request: Request,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    stripe: StripeClient = Depends(get_stripe_client),
):
    """
    Start a hosted Stripe Checkout for an order.

    The order is moved back to a pending payment that points at the new
    session. A failed order update is logged and the session is still
    returned.
    """
    request_id = get_request_id(request)

    if (
        request_body.order_id is None
        or request_body.items is None
        or not request_body.success_url
        or not request_body.cancel_url
    ):
        raise HTTPException(status_code=400, detail="Missing required parameters")

    try:
        email = ProfileRepository(db).get_email(principal.user_id)
    except SQLAlchemyError as e:
        raise _database_error(db, request_id, e, "Error retrieving user information")
    if email is None:
        raise HTTPException(status_code=500, detail="Error retrieving user information")

    try:
        session = await stripe.create_checkout_session(
            line_items=checkout_line_items(request_body.items),
            success_url=request_body.success_url,
            cancel_url=request_body.cancel_url,
            customer_email=email,
            metadata={
                "orderId": str(request_body.order_id),
                "userId": principal.user_id,
                "discountIds": json.dumps(request_body.discounts) if request_body.discounts else None,
            },
        )
    except (PaymentProviderError, ConfigurationError) as e:
        raise _payment_error(request_id, e)

    try:
        attached = OrderRepository(db).attach_checkout_session(request_body.order_id, principal.user_id, session.id)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        record_upstream_failure("database")
        logging.error(
            f"Error updating order with checkout session: {e}",
            extra={"request_id": request_id, "checkout_session_id": session.id},
        )
    else:
        if not attached:
            logging.warning(
                "Checkout session created for an order the caller does not own",
                extra={"request_id": request_id, "order_id": request_body.order_id},
            )

    return CheckoutResponse(url=session.url, session_id=session.id)


@router.post("/payment/shipping", response_model=ShippingPaymentResponse, response_model_exclude_none=True)
async def pay_shipping(
    request_body: ShippingPaymentRequest,
    request: Request,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    stripe: StripeClient = Depends(get_stripe_client),
):
    """
    Charge shipping for a repair appointment.

    Flow:
    1. Check the appointment belongs to the caller
    2. Create and confirm the payment intent
    3. Store delivery and shipping details on the appointment
    4. Record a completed "shipping" income transaction
    """
    request_id = get_request_id(request)
    appointments = AppointmentRepository(db)

    try:
        appointment = appointments.get(request_body.appointment_id, user_uid=principal.user_id)
    except SQLAlchemyError as e:
        raise _database_error(db, request_id, e, "Failed to fetch appointment")
    if appointment is None:
        raise HTTPException(status_code=404, detail="Appointment not found")

    address = request_body.shipping_address.model_dump() if request_body.shipping_address else None
    shipping = None
    if address:
        shipping = {
            "name": address["name"],
            "address": {**address["address"], "line2": address["address"].get("line2") or ""},
        }

    try:
        intent = await stripe.create_payment_intent(
            amount_cents=to_cents(request_body.amount),
            payment_method_id=request_body.payment_method_id,
            description=f"Shipping payment for repair #{request_body.appointment_id}",
            metadata={
                **request_body.metadata,
                "appointmentId": str(request_body.appointment_id),
                "customerId": request_body.customer_id,
                "deliveryMethod": request_body.delivery_method,
            },
            shipping=shipping,
        )
    except (PaymentProviderError, ConfigurationError) as e:
        raise _payment_error(request_id, e)

    record_payment_intent(intent.status)
    if intent.status != "succeeded":
        raise HTTPException(status_code=400, detail={"error": "Payment failed", "status": intent.status})

    amount = Decimal(str(request_body.amount))
    try:
        appointments.update_shipping(
            appointment,
            delivery_method=request_body.delivery_method,
            payment_id=intent.id,
            shipping_cost=amount,
            shipping_address=address,
        )
        TransactionRepository(db).create(
            user_uid=principal.user_id,
            amount=amount,
            type="income",
            category="shipping",
            description=f"Shipping payment for appointment #{request_body.appointment_id}",
            appointment_id=request_body.appointment_id,
        )
        db.commit()
    except SQLAlchemyError as e:
        # Card is already charged; the intent id is still returned
        db.rollback()
        record_upstream_failure("database")
        logging.error(
            f"Error updating appointment after payment: {e}",
            extra={"request_id": request_id, "payment_intent_id": intent.id},
        )
        return ShippingPaymentResponse(id=intent.id, warning="Payment processed but database update failed")

    return ShippingPaymentResponse(id=intent.id, status=intent.status)


@router.post("/refund-request", response_model=SuccessResponse)
def create_refund_request(
    request_body: RefundRequestCreate,
    request: Request,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Customer asks for a refund of a delivered, paid order"""
    orders = OrderRepository(db)

    try:
        order = orders.get(request_body.order_id, user_uid=principal.user_id)
        if order is None:
            raise HTTPException(status_code=404, detail="Order not found or does not belong to you")

        if not can_request_refund(order.status, order.payment_status):
            raise HTTPException(status_code=400, detail="Order is not eligible for refund")

        latest = orders.latest_refund_request(order.id)
        if latest is not None and has_open_refund_request(latest.status):
            raise HTTPException(status_code=400, detail="A refund request already exists for this order")

        orders.create_refund_request(order, principal.user_id, request_body.reason, request_body.additional_info)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        record_upstream_failure("database")
        logging.error(f"Error creating refund request: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Failed to create refund request")

    return SuccessResponse(message="Refund request submitted successfully")


@router.post("/refund", response_model=RefundResponse)
async def create_refund(
    request_body: RefundCreate,
    request: Request,
    principal: Principal = Depends(require_roles(*ADMIN_ROLES)),
    db: Session = Depends(get_db),
    stripe: StripeClient = Depends(get_stripe_client),
):
    """Refund an order through Stripe; amount is in cents"""
    request_id = get_request_id(request)
    orders = OrderRepository(db)

    try:
        order = orders.get(request_body.order_id)
    except SQLAlchemyError as e:
        raise _database_error(db, request_id, e, "Failed to fetch order")
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")

    if not can_refund(order.payment_status):
        raise HTTPException(status_code=400, detail="Order is not eligible for refund")

    try:
        refund = await stripe.create_refund(request_body.payment_intent_id, request_body.amount)
    except (PaymentProviderError, ConfigurationError) as e:
        raise _payment_error(request_id, e)

    status = classify_refund(request_body.amount, order.total_amount)
    amount = cents_to_amount(request_body.amount)
    refund_counter.labels(kind=status).inc()

    try:
        orders.record_refund(order, status, amount, request_body.reason, refund.id, refund.raw)
        db.commit()
    except SQLAlchemyError as e:
        # Stripe has already issued the refund
        db.rollback()
        record_upstream_failure("database")
        logging.error(f"Error updating order after refund: {e}", extra={"request_id": request_id, "refund_id": refund.id})

    logging.info(
        "Refund processed",
        extra={"request_id": request_id, "user_id": principal.user_id, "order_id": order.id, "status": status},
    )
    return RefundResponse(refund_id=refund.id, status=status, amount=float(amount))
