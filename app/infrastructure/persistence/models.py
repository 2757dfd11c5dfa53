"""Domain aggregates read by the realtime and notification services.

The records mirror the columns the pharmacy backend exposes to this
service. They are read through the store interfaces in
``infrastructure.persistence.stores``; only orders, inventory items and
delivery locations are written from here.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, EmailStr, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, Enum):
    """Roles a user can hold inside a tenant."""

    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    PHARMACIST = "PHARMACIST"
    WORKER = "WORKER"
    CUSTOMER = "CUSTOMER"
    DELIVERY = "DELIVERY"


PHARMACIST_ROLES = (UserRole.ADMIN, UserRole.PHARMACIST)
STAFF_ROLES = (UserRole.ADMIN, UserRole.PHARMACIST, UserRole.WORKER)


class UserProfile(BaseModel):
    """User record with the contact details needed for delivery.

    Attributes:
        id: User id (``sub`` claim of the access token)
        tenant_id: Owning tenant
        pharmacy_id: Pharmacy the user works at, for staff roles
        role: UserRole
        name: Display name
        email: Email address, when the user has one
        phone: Phone number, when the user has one
        is_active: Inactive users cannot connect and receive no staff fan-out
    """

    id: str
    tenant_id: str
    pharmacy_id: Optional[str] = None
    role: UserRole = UserRole.CUSTOMER
    name: str = ""
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    is_active: bool = True

    @property
    def has_email(self) -> bool:
        return bool(self.email)

    @property
    def has_phone(self) -> bool:
        return bool(self.phone)


class Pharmacy(BaseModel):
    id: str
    tenant_id: str
    name: str
    phone: Optional[str] = None
    address: Optional[str] = None


class Order(BaseModel):
    """Customer order.

    ``items`` is kept as the opaque line-item list the order service stores.
    """

    id: str
    tenant_id: str
    pharmacy_id: str
    customer_id: str
    delivery_user_id: Optional[str] = None
    status: str = "PENDING"
    total: float = 0.0
    items: List[Dict[str, Any]] = Field(default_factory=list)
    estimated_delivery: Optional[datetime] = None
    updated_at: datetime = Field(default_factory=utc_now)


class Prescription(BaseModel):
    id: str
    tenant_id: str
    pharmacy_id: str
    patient_id: str
    doctor_name: Optional[str] = None
    items: List[Dict[str, Any]] = Field(default_factory=list)
    status: str = "PENDING"


class InventoryItem(BaseModel):
    """Stock line of a pharmacy.

    Only the fields in ``EDITABLE_FIELDS`` may be changed through a
    collaborative update.
    """

    EDITABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset(
        {
            "item_name",
            "quantity",
            "price",
            "reorder_level",
            "batch_number",
            "expiry_date",
            "location",
        }
    )

    id: str
    tenant_id: str
    pharmacy_id: str
    item_name: str
    quantity: int = 0
    price: float = 0.0
    reorder_level: int = 0
    batch_number: Optional[str] = None
    expiry_date: Optional[str] = None
    location: Optional[str] = None
    updated_at: datetime = Field(default_factory=utc_now)


class DeliveryLocation(BaseModel):
    """One point of a delivery's location history."""

    order_id: str
    latitude: float
    longitude: float
    accuracy: Optional[float] = None
    recorded_at: datetime = Field(default_factory=utc_now)
