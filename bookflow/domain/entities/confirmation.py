from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class BookingConfirmation:
    service: str
    datetime: datetime
    practitioner: str
    confirmation_number: str
    total_amount: Decimal
    client_name: str | None = None
    payment_method: str | None = None
