"""Pydantic models for the checkout flow.

The initialization request deliberately has no price field: the charge
amount only ever comes back from the server (OrderInitializationResult).
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from eventify.cart.store import CartItem


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CustomerInfo(_CamelModel):
    first_name: str = ""
    last_name: str = ""
    email: Optional[EmailStr] = None
    phone: str = ""
    city: str = ""
    state: str = ""
    country: str = ""


class OrderItemRequest(_CamelModel):
    event_id: str
    tier_name: str
    quantity: int = Field(ge=1)


class OrderInitializationRequest(_CamelModel):
    """Built fresh for every checkout attempt."""

    email: EmailStr
    items: List[OrderItemRequest] = Field(min_length=1)
    customer: CustomerInfo = Field(default_factory=CustomerInfo)

    @classmethod
    def from_cart(cls, email: str, items: List[CartItem], customer: Optional[CustomerInfo] = None) -> "OrderInitializationRequest":
        return cls(
            email=email,
            items=[
                OrderItemRequest(event_id=i.event_id, tier_name=i.tier_name, quantity=i.quantity)
                for i in items
            ],
            customer=customer or CustomerInfo(),
        )

    def to_payload(self) -> Dict[str, Any]:
        """
        Wire payload for POST /api/orders/initialize.
        The backend also reads firstName/lastName/phone at the top level.
        """
        payload = self.model_dump(mode="json", by_alias=True)
        payload["firstName"] = self.customer.first_name
        payload["lastName"] = self.customer.last_name
        payload["phone"] = self.customer.phone
        return payload


class OrderInitializationResult(BaseModel):
    """Server-issued reference and authoritative charge amount (kobo)."""

    reference: str = Field(min_length=1)
    amount_kobo: int = Field(ge=0)


class VerificationStatus(str, Enum):
    VERIFYING = "verifying"
    SUCCESS = "success"
    PENDING = "pending"
    PENDING_TIMEOUT = "pending_timeout"
    FAILED = "failed"
    NOT_FOUND = "not_found"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self not in (VerificationStatus.VERIFYING, VerificationStatus.PENDING)

    @property
    def is_ambiguous(self) -> bool:
        """Outcome unknown: the user is told to check back, not that it failed."""
        return self in (VerificationStatus.PENDING_TIMEOUT, VerificationStatus.ERROR)


class VerificationResult(BaseModel):
    reference: str
    status: VerificationStatus
    attempts: int = 0
    data: Optional[Dict[str, Any]] = None
    message: Optional[str] = None
