"""Unit tests for checkout line items and refund eligibility"""

from decimal import Decimal
from storefront_gateway.api.v1.schemas import CheckoutItem
from storefront_gateway.domain.payments import (
    can_refund,
    can_request_refund,
    cents_to_amount,
    checkout_line_items,
    classify_refund,
    has_open_refund_request,
)


def test_classify_full_refund():
    assert classify_refund(4999, Decimal("49.99")) == "refunded"
    assert classify_refund(6000, Decimal("49.99")) == "refunded"


def test_classify_partial_refund():
    assert classify_refund(1000, Decimal("49.99")) == "partially_refunded"


def test_can_refund_states():
    assert can_refund("paid")
    assert can_refund("partially_refunded")
    assert not can_refund("refunded")
    assert not can_refund("pending")
    assert not can_refund(None)


def test_customer_refund_needs_delivered_and_paid():
    assert can_request_refund("delivered", "paid")
    assert not can_request_refund("shipped", "paid")
    assert not can_request_refund("delivered", "pending")


def test_open_refund_request():
    assert has_open_refund_request("pending")
    assert has_open_refund_request("approved")
    assert not has_open_refund_request("rejected")
    assert not has_open_refund_request(None)


def test_cents_to_amount():
    assert cents_to_amount(1999) == Decimal("19.99")


def test_checkout_line_items_round_to_cents():
    items = [
        CheckoutItem(name="Battery", price=0.295, quantity=3),
        CheckoutItem(name="Case", price=12, image="https://cdn.example.com/case.jpg"),
    ]

    battery, case = checkout_line_items(items)

    assert battery == {
        "price_data": {
            "currency": "usd",
            "product_data": {"name": "Battery", "images": None},
            "unit_amount": 30,
        },
        "quantity": 3,
    }
    assert case["price_data"]["unit_amount"] == 1200
    assert case["price_data"]["product_data"]["images"] == ["https://cdn.example.com/case.jpg"]
    assert case["quantity"] == 1
