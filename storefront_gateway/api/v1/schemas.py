"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from storefront_gateway.domain.authorization import DEFAULT_ROLE


class CamelModel(BaseModel):
    """Serialized with camelCase keys, accepts either casing on input"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Admin reports


class RevenueTotalResponse(CamelModel):
    total_revenue: float


class RevenueByCategoryResponse(CamelModel):
    revenue_by_category: Dict[str, float]


class ExpensesTotalResponse(CamelModel):
    total_expenses: float


class ProfitTotalResponse(CamelModel):
    total_profit: float


class MarginPointSchema(BaseModel):
    date: str
    margin: float


class ProfitMarginResponse(CamelModel):
    profit_margin: List[MarginPointSchema]


class CashFlowResponse(CamelModel):
    cash_flow: Dict[str, float]


# User administration


class ProfileSchema(BaseModel):
    role: str = DEFAULT_ROLE
    email_notifications: bool = True
    sms_notifications: bool = False
    preferred_language: str = "en"


class UserSchema(BaseModel):
    id: str
    email: str
    created_at: Optional[datetime] = None
    last_sign_in_at: Optional[datetime] = None
    profile: ProfileSchema


class UsersResponse(BaseModel):
    users: List[UserSchema]


class UpdateUserRequest(BaseModel):
    id: str = Field(..., min_length=1)
    profile: ProfileSchema


class SuccessResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


class StripeKeysResponse(CamelModel):
    stripe_public_key: Optional[str] = None
    stripe_secret_key: Optional[str] = None
    stripe_webhook_secret: Optional[str] = None
    currency: str = "usd"


# Payments


class PaymentSettingsSchema(BaseModel):
    stripe_public_key: str = ""
    payment_currency: str = "usd"
    enable_stripe_checkout: bool = True
    enable_stripe_elements: bool = True


class PaymentSettingsResponse(BaseModel):
    settings: PaymentSettingsSchema


class CreateIntentRequest(CamelModel):
    amount: float = Field(..., gt=0, description="Amount in currency units")
    payment_method_id: str = Field(..., min_length=1)
    customer_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class CreateIntentResponse(CamelModel):
    client_secret: Optional[str] = None
    status: str
    id: str


class AddressSchema(BaseModel):
    line1: str
    line2: Optional[str] = None
    city: str
    state: Optional[str] = None
    postal_code: str
    country: str


class ShippingAddressSchema(BaseModel):
    name: str
    address: AddressSchema


class ShippingPaymentRequest(CamelModel):
    appointment_id: int
    amount: float = Field(..., gt=0)
    payment_method_id: str = Field(..., min_length=1)
    customer_id: Optional[str] = None
    delivery_method: Optional[str] = None
    shipping_address: Optional[ShippingAddressSchema] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ShippingPaymentResponse(BaseModel):
    id: str
    status: Optional[str] = None
    warning: Optional[str] = None


class CheckoutItem(BaseModel):
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0, description="Unit price in currency units")
    quantity: int = Field(1, ge=1)
    image: Optional[str] = None


class CheckoutRequest(CamelModel):
    order_id: Optional[int] = None
    items: Optional[List[CheckoutItem]] = None
    discounts: List[str] = Field(default_factory=list)
    success_url: Optional[str] = None
    cancel_url: Optional[str] = None


class CheckoutResponse(CamelModel):
    url: Optional[str] = None
    session_id: str


class RefundRequestCreate(CamelModel):
    order_id: int
    reason: str = Field(..., min_length=1)
    additional_info: Optional[str] = None


class RefundCreate(CamelModel):
    payment_intent_id: str = Field(..., min_length=1)
    amount: int = Field(..., gt=0, description="Refund amount in cents")
    reason: Optional[str] = None
    order_id: int


class RefundResponse(CamelModel):
    success: bool = True
    refund_id: str
    status: str
    amount: float


# AI


class GenerateDescriptionRequest(CamelModel):
    image_url: str = Field(..., min_length=1)
    prompt: Optional[str] = None


class DescriptionResponse(BaseModel):
    description: Optional[str] = None


class EmbeddingRequest(BaseModel):
    text: str = Field(..., min_length=1)


class EmbeddingResponse(BaseModel):
    embedding: List[float]


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)


class ChatResponse(BaseModel):
    response: str
