"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Union

Amount = Union[Decimal, float, int]

# Repair status ids as stored in the appointments table
RepairStatusMap = Dict[int, str]

REPAIR_STATUS_MAP: RepairStatusMap = {
    1: "pending",
    2: "in_progress",
    3: "completed",
}


@dataclass
class Principal:
    """Authenticated caller resolved from the session token"""

    user_id: str
    email: Optional[str] = None
    role: Optional[str] = None


@dataclass
class TransactionRow:
    """Transaction fields read by the aggregation step"""

    amount: Optional[Amount]
    type: str  # "income" or "expense"
    created_at: Optional[datetime] = None
    category: Optional[str] = None


@dataclass
class MarginPoint:
    """Profit margin for a single day"""

    date: str
    margin: float


@dataclass
class DeviceInfo:
    """Device under repair"""

    brand: str = ""
    model: str = ""

    def display_name(self) -> str:
        return f"{self.brand} {self.model}".strip()


@dataclass
class AppointmentItem:
    """Service or part booked on an appointment"""

    service_name: str
    variant_value: Optional[str] = None

    def display_name(self) -> str:
        if self.variant_value:
            return f"{self.service_name} ({self.variant_value})"
        return self.service_name


@dataclass
class RepairAppointment:
    """Appointment data consumed by the confirmation email builder"""

    id: int
    status_id: int
    appointment_date: datetime
    customer_name: str
    customer_email: str
    device: DeviceInfo
    items: List[AppointmentItem] = field(default_factory=list)
    estimated_completion_date: Optional[datetime] = None
    actual_completion_date: Optional[datetime] = None
    technician_notes: Optional[str] = None
    problem_description: Optional[str] = None

    @property
    def status(self) -> str:
        return REPAIR_STATUS_MAP.get(self.status_id, "pending")


@dataclass
class EmailContent:
    subject: str
    html: str
    text: str


@dataclass
class PaymentIntent:
    """Subset of a Stripe PaymentIntent used by the API"""

    id: str
    status: str
    client_secret: Optional[str] = None


@dataclass
class CheckoutSession:
    """Hosted Stripe Checkout page created for an order"""

    id: str
    url: Optional[str] = None


@dataclass
class Refund:
    id: str
    status: str
    amount: int
    raw: Dict = field(default_factory=dict)
