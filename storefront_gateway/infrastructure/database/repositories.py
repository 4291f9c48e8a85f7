"""Data access layer for storefront entities"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from storefront_gateway.domain.models import (
    AppointmentItem as AppointmentItemDTO,
    DeviceInfo,
    RepairAppointment,
    TransactionRow,
)
from storefront_gateway.infrastructure.database.models import (
    Appointment,
    Order,
    PaymentTransaction,
    Product,
    Profile,
    RefundRequest,
    Setting,
    Transaction,
    User,
)
from storefront_gateway.utils.date_utils import utcnow

COMPLETED = "completed"


class TransactionRepository:
    """Repository for income/expense transactions"""

    def __init__(self, db: Session):
        self.db = db

    def get_completed(
        self,
        user_uid: str,
        type: Optional[str] = None,
        require_category: bool = False,
    ) -> List[TransactionRow]:
        """Completed transactions of a user, oldest first, optionally of one type"""
        query = self.db.query(Transaction).filter(
            Transaction.user_uid == user_uid,
            Transaction.status == COMPLETED,
        )
        if type is not None:
            query = query.filter(Transaction.type == type)
        if require_category:
            query = query.filter(Transaction.category.isnot(None))

        return [
            TransactionRow(
                amount=t.amount,
                type=t.type,
                created_at=t.created_at,
                category=t.category,
            )
            for t in query.order_by(Transaction.created_at.asc(), Transaction.id.asc()).all()
        ]

    def create(
        self,
        user_uid: str,
        amount: Decimal,
        type: str,
        category: Optional[str] = None,
        description: Optional[str] = None,
        status: str = COMPLETED,
        appointment_id: Optional[int] = None,
    ) -> Transaction:
        transaction = Transaction(
            user_uid=user_uid,
            amount=amount,
            type=type,
            category=category,
            description=description,
            status=status,
            appointment_id=appointment_id,
        )
        self.db.add(transaction)
        self.db.flush()
        return transaction


class ProfileRepository:
    """Repository for users and their profiles"""

    def __init__(self, db: Session):
        self.db = db

    def get_role(self, user_id: str) -> Optional[str]:
        """Stored role for a user, or None when no profile exists"""
        profile = self.db.get(Profile, user_id)
        return profile.role if profile else None

    def list_users(self) -> List[User]:
        return (
            self.db.query(User)
            .options(selectinload(User.profile))
            .order_by(User.created_at.asc())
            .all()
        )

    def get_profile(self, user_id: str) -> Optional[Profile]:
        return self.db.get(Profile, user_id)

    def update_profile(self, profile: Profile, changes: Dict[str, Any]) -> Profile:
        for name, value in changes.items():
            setattr(profile, name, value)
        self.db.flush()
        return profile

    def delete_user(self, user_id: str) -> bool:
        """Delete a user and its profile; False when the user does not exist"""
        user = self.db.get(User, user_id)
        if user is None:
            return False
        self.db.delete(user)
        self.db.flush()
        return True

    def get_email(self, user_id: str) -> Optional[str]:
        user = self.db.get(User, user_id)
        return user.email if user else None


class SettingsRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, type: str) -> Optional[Dict[str, Any]]:
        """Settings blob of the given type, or None if not stored"""
        row = self.db.query(Setting).filter(Setting.type == type).first()
        return dict(row.settings or {}) if row else None


class OrderRepository:
    """Repository for orders, refund requests and payment log entries"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, order_id: int, user_uid: Optional[str] = None) -> Optional[Order]:
        query = self.db.query(Order).filter(Order.id == order_id)
        if user_uid is not None:
            query = query.filter(Order.user_uid == user_uid)
        return query.first()

    def latest_refund_request(self, order_id: int) -> Optional[RefundRequest]:
        return (
            self.db.query(RefundRequest)
            .filter(RefundRequest.order_id == order_id)
            .order_by(RefundRequest.created_at.desc(), RefundRequest.id.desc())
            .first()
        )

    def create_refund_request(
        self,
        order: Order,
        user_uid: str,
        reason: str,
        additional_info: Optional[str],
    ) -> RefundRequest:
        request = RefundRequest(
            order_id=order.id,
            user_uid=user_uid,
            payment_id=order.payment_id,
            reason=reason,
            additional_info=additional_info,
            status="pending",
        )
        self.db.add(request)

        order.refund_status = "pending"
        order.refund_reason = reason
        order.updated_at = utcnow()
        self.db.flush()
        return request

    def record_refund(
        self,
        order: Order,
        payment_status: str,
        amount: Decimal,
        reason: Optional[str],
        refund_id: str,
        details: Dict[str, Any],
    ) -> PaymentTransaction:
        """Mark the order refunded and log the processor transaction"""
        now = utcnow()
        order.payment_status = payment_status
        order.refund_amount = amount
        order.refund_reason = reason
        order.refund_date = now
        order.refund_details = details
        order.updated_at = now

        log_entry = PaymentTransaction(
            order_id=order.id,
            transaction_type="refund",
            amount=amount,
            payment_processor="stripe",
            transaction_id=refund_id,
            status=COMPLETED,
            details=details,
        )
        self.db.add(log_entry)
        self.db.flush()
        return log_entry

    def attach_checkout_session(self, order_id: int, user_uid: str, session_id: str) -> bool:
        """Point the caller's order at a new checkout session and reset it to pending"""
        order = self.get(order_id, user_uid=user_uid)
        if order is None:
            return False
        order.stripe_payment_id = session_id
        order.payment_status = "pending"
        order.updated_at = utcnow()
        self.db.flush()
        return True


class AppointmentRepository:
    """Repository for repair appointments"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, appointment_id: int, user_uid: Optional[str] = None) -> Optional[Appointment]:
        query = self.db.query(Appointment).filter(Appointment.id == appointment_id)
        if user_uid is not None:
            query = query.filter(Appointment.user_uid == user_uid)
        return query.first()

    def get_for_email(self, appointment_id: int) -> Optional[RepairAppointment]:
        """Appointment with device and items, shaped for the email builder"""
        appointment = (
            self.db.query(Appointment)
            .options(selectinload(Appointment.items))
            .filter(Appointment.id == appointment_id)
            .first()
        )
        if appointment is None:
            return None

        return RepairAppointment(
            id=appointment.id,
            status_id=appointment.status_id,
            appointment_date=appointment.appointment_date,
            customer_name=appointment.customer_name,
            customer_email=appointment.customer_email,
            device=DeviceInfo(
                brand=appointment.device_brand or "",
                model=appointment.device_model or "",
            ),
            items=[
                AppointmentItemDTO(service_name=item.service_name, variant_value=item.variant_value)
                for item in appointment.items
            ],
            estimated_completion_date=appointment.estimated_completion_date,
            actual_completion_date=appointment.actual_completion_date,
            technician_notes=appointment.technician_notes,
            problem_description=appointment.problem_description,
        )

    def update_shipping(
        self,
        appointment: Appointment,
        delivery_method: Optional[str],
        payment_id: str,
        shipping_cost: Decimal,
        shipping_address: Optional[Dict[str, Any]],
    ) -> None:
        appointment.delivery_method = delivery_method
        appointment.stripe_payment_id = payment_id
        appointment.shipping_cost = shipping_cost
        if shipping_address:
            address = shipping_address.get("address") or {}
            appointment.shipping_name = shipping_address.get("name")
            appointment.shipping_address = address.get("line1")
            appointment.shipping_address_line2 = address.get("line2")
            appointment.shipping_city = address.get("city")
            appointment.shipping_state = address.get("state")
            appointment.shipping_postal_code = address.get("postal_code")
            appointment.shipping_country = address.get("country")
        self.db.flush()


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def search_by_name(self, query: str, limit: int = 3) -> List[Product]:
        """Products whose name matches any word of the query"""
        terms = [term for term in query.split() if len(term) > 2]
        if not terms:
            return []

        conditions = [Product.name.ilike(f"%{term}%") for term in terms]
        return self.db.query(Product).filter(or_(*conditions)).limit(limit).all()
