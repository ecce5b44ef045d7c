from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field


class WizardCreateSchema(BaseModel):
    client_ref: str | None = None  # reopening with the same ref reuses the card mount point


class ServiceSchema(BaseModel):
    service_key: str
    name: str
    duration_minutes: int
    price: Decimal


class AddonSchema(BaseModel):
    addon_id: str
    name: str
    price: Decimal
    available_for: list[str] = Field(default_factory=list)


class DraftSchema(BaseModel):
    service_type: str | None = None
    addons: list[str] = Field(default_factory=list)
    scheduled_date: date | None = None
    scheduled_time: str | None = None
    client_name: str | None = None
    client_email: str | None = None
    client_phone: str | None = None
    special_requests: str | None = None
    payment_method: str | None = None
    tip_amount: Decimal = Decimal("0.00")
    total_price: Decimal | None = None
    amount_due: Decimal | None = None
    booking_id: str | None = None
    locked: bool = False


class WizardStateSchema(BaseModel):
    wizard_id: str
    step: str
    can_confirm: bool
    draft: DraftSchema
    failure_reason: str | None = None
    payment_captured: bool = False  # paid at checkout, booking write still pending
    redirect_url: str | None = None
    confirmation: dict[str, Any] | None = None


class ServiceSelectionSchema(BaseModel):
    service_type: str
    addons: list[str] = Field(default_factory=list)


class SlotSchema(BaseModel):
    time: str
    available: bool


class AvailabilitySchema(BaseModel):
    date: date
    slots: list[SlotSchema]


class DateTimeSchema(BaseModel):
    scheduled_date: date
    scheduled_time: str


class ContactInfoSchema(BaseModel):
    # Optional so each missing field comes back as its own validation message
    client_name: str | None = None
    client_email: str | None = None
    client_phone: str | None = None
    special_requests: str | None = None


class PaymentMethodSchema(BaseModel):
    payment_method: str
    tip_amount: Decimal = Decimal("0.00")


class BatchDeleteRequestSchema(BaseModel):
    booking_ids: list[str] = Field(min_length=1)


class DeleteOutcomeSchema(BaseModel):
    booking_id: str
    deleted: bool
    reason: str | None = None


class BatchDeleteResponseSchema(BaseModel):
    deleted: int
    failed: int
    results: list[DeleteOutcomeSchema]
