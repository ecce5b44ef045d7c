from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class PaymentMethod(str, Enum):
    cash = "cash"
    card = "card"


class PaymentIntentStatus(str, Enum):
    pending = "pending"
    redirected = "redirected"
    confirmed = "confirmed"
    failed = "failed"


class PaymentStatus(str, Enum):
    """Values the booking API stores in ``payment_status``."""

    unpaid = "unpaid"
    paid = "paid"


@dataclass
class PaymentIntentRef:
    method: PaymentMethod
    booking_ref: str
    amount: Decimal
    external_session_id: str | None = None
    status: PaymentIntentStatus = PaymentIntentStatus.pending
    checkout_url: str | None = None

    @property
    def is_open(self) -> bool:
        return self.status in (PaymentIntentStatus.pending, PaymentIntentStatus.redirected)
