"""SQLAlchemy ORM models mirroring the storefront tables"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    Numeric,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class User(Base):
    """Auth provider user record"""

    __tablename__ = "users"

    id = Column(Text, primary_key=True)
    email = Column(Text, nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    last_sign_in_at = Column(DateTime(timezone=True), nullable=True)

    profile = relationship("Profile", back_populates="user", uselist=False, cascade="all, delete-orphan")


class Profile(Base):
    """Per-user settings, including the role used for authorization"""

    __tablename__ = "profiles"

    id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    role = Column(Text, nullable=False, default="customer")
    email_notifications = Column(Boolean, nullable=False, default=True)
    sms_notifications = Column(Boolean, nullable=False, default=False)
    preferred_language = Column(Text, nullable=False, default="en")

    user = relationship("User", back_populates="profile")


class Transaction(Base):
    """Income or expense entry created by checkout and payment flows"""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_uid = Column(Text, nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=True)
    type = Column(Text, nullable=False)  # income | expense
    category = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    status = Column(Text, nullable=False, default="pending")
    appointment_id = Column(Integer, ForeignKey("appointments.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Setting(Base):
    """Keyed JSON settings blob, e.g. type="payment" """

    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(Text, nullable=False, unique=True)
    settings = Column(JSON, nullable=False, default=dict)


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_uid = Column(Text, nullable=False, index=True)
    status = Column(Text, nullable=False, default="pending")
    payment_status = Column(Text, nullable=False, default="pending")
    payment_id = Column(Text, nullable=True)
    stripe_payment_id = Column(Text, nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=False)
    refund_status = Column(Text, nullable=True)
    refund_amount = Column(Numeric(12, 2), nullable=True)
    refund_reason = Column(Text, nullable=True)
    refund_date = Column(DateTime(timezone=True), nullable=True)
    refund_details = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True)

    refund_requests = relationship("RefundRequest", back_populates="order", cascade="all, delete-orphan")


class RefundRequest(Base):
    """Customer-submitted refund request awaiting admin review"""

    __tablename__ = "refund_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    user_uid = Column(Text, nullable=False)
    payment_id = Column(Text, nullable=True)
    reason = Column(Text, nullable=False)
    additional_info = Column(Text, nullable=True)
    status = Column(Text, nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    order = relationship("Order", back_populates="refund_requests")


class PaymentTransaction(Base):
    """Processor-side payment or refund log entry"""

    __tablename__ = "payment_transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="SET NULL"), nullable=True)
    transaction_type = Column(Text, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    payment_processor = Column(Text, nullable=False, default="stripe")
    transaction_id = Column(Text, nullable=True)
    status = Column(Text, nullable=False)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    base_price = Column(Numeric(12, 2), nullable=False)
    in_stock = Column(Integer, nullable=False, default=0)
    brand_name = Column(Text, nullable=True)


class Appointment(Base):
    """Repair appointment with denormalized device and shipping details"""

    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_uid = Column(Text, nullable=True, index=True)
    customer_id = Column(Text, nullable=True)
    customer_name = Column(Text, nullable=False)
    customer_email = Column(Text, nullable=False)
    status_id = Column(Integer, nullable=False, default=1)
    appointment_date = Column(DateTime(timezone=True), nullable=False)
    estimated_completion_date = Column(DateTime(timezone=True), nullable=True)
    actual_completion_date = Column(DateTime(timezone=True), nullable=True)
    technician_notes = Column(Text, nullable=True)
    problem_description = Column(Text, nullable=True)
    device_brand = Column(Text, nullable=True)
    device_model = Column(Text, nullable=True)

    delivery_method = Column(Text, nullable=True)
    stripe_payment_id = Column(Text, nullable=True)
    shipping_cost = Column(Numeric(12, 2), nullable=True)
    shipping_name = Column(Text, nullable=True)
    shipping_address = Column(Text, nullable=True)
    shipping_address_line2 = Column(Text, nullable=True)
    shipping_city = Column(Text, nullable=True)
    shipping_state = Column(Text, nullable=True)
    shipping_postal_code = Column(Text, nullable=True)
    shipping_country = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    items = relationship("AppointmentItem", back_populates="appointment", cascade="all, delete-orphan")


class AppointmentItem(Base):
    __tablename__ = "appointment_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id", ondelete="CASCADE"), nullable=False)
    is_service = Column(Boolean, nullable=False, default=True)
    service_name = Column(Text, nullable=False)
    variant_value = Column(Text, nullable=True)

    appointment = relationship("Appointment", back_populates="items")
