from __future__ import annotations

import uuid
from dataclasses import dataclass, field, fields
from datetime import date
from decimal import Decimal

from bookflow.domain.entities.payment import PaymentMethod


class DraftLockedError(RuntimeError):
    """Raised when a locked (submitted) draft is edited."""


@dataclass
class BookingDraft:
    draft_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    service_type: str | None = None
    addons: tuple[str, ...] = ()
    scheduled_date: date | None = None
    scheduled_time: str | None = None  # HH:MM
    client_name: str | None = None
    client_email: str | None = None
    client_phone: str | None = None
    special_requests: str | None = None
    payment_method: PaymentMethod | None = None
    tip_amount: Decimal = Decimal("0.00")
    total_price: Decimal | None = None  # base service price + add-ons, never the tip
    booking_id: str | None = None  # set when the draft edits an existing booking
    locked: bool = False

    def update(self, **changes: object) -> None:
        if self.locked:
            raise DraftLockedError(f"Draft {self.draft_id} is locked while submitting")
        known = {f.name for f in fields(self)} - {"draft_id", "locked"}
        for key, value in changes.items():
            if key not in known:
                raise AttributeError(f"BookingDraft has no field {key!r}")
            setattr(self, key, value)

    def lock(self) -> None:
        self.locked = True

    def unlock(self) -> None:
        self.locked = False

    @property
    def amount_due(self) -> Decimal | None:
        if self.total_price is None:
            return None
        return (self.total_price + self.tip_amount).quantize(Decimal("0.01"))

    def clear(self) -> None:
        """Drop everything the client entered; keeps the draft id."""
        self.locked = False
        for f in fields(self):
            if f.name in ("draft_id", "locked"):
                continue
            if f.name == "tip_amount":
                self.tip_amount = Decimal("0.00")
            elif f.name == "addons":
                self.addons = ()
            else:
                setattr(self, f.name, None)
