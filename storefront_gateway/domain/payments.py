"""Checkout line items and refund eligibility rules"""

from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from storefront_gateway.domain.aggregation import to_cents
from storefront_gateway.domain.models import Amount

REFUNDABLE_PAYMENT_STATUSES = ("paid", "partially_refunded")
OPEN_REFUND_REQUEST_STATUSES = ("pending", "approved")

REFUNDED = "refunded"
PARTIALLY_REFUNDED = "partially_refunded"


def can_refund(payment_status: Optional[str]) -> bool:
    return payment_status in REFUNDABLE_PAYMENT_STATUSES


def can_request_refund(order_status: Optional[str], payment_status: Optional[str]) -> bool:
    """Only delivered and paid orders may be refunded by the customer"""
    return order_status == "delivered" and payment_status == "paid"


def has_open_refund_request(latest_status: Optional[str]) -> bool:
    return latest_status in OPEN_REFUND_REQUEST_STATUSES


def classify_refund(amount_cents: int, order_total: Amount) -> str:
    """A refund covering the whole order total is full, anything less is partial"""
    return REFUNDED if amount_cents >= to_cents(order_total) else PARTIALLY_REFUNDED


def cents_to_amount(amount_cents: int) -> Decimal:
    return Decimal(amount_cents) / 100


def checkout_line_items(items: Iterable, currency: str = "usd") -> List[Dict[str, Any]]:
    """Stripe Checkout line items; unit prices are converted to cents"""
    return [
        {
            "price_data": {
                "currency": currency,
                "product_data": {
                    "name": item.name,
                    "images": [item.image] if item.image else None,
                },
                "unit_amount": to_cents(item.price),
            },
            "quantity": item.quantity,
        }
        for item in items
    ]
