from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any
from zoneinfo import ZoneInfo

import pytest

from bookflow.application.dto.gateway_result import Failure, GatewayResult
from bookflow.application.use_cases.admin_editor import AdminBookingEditor
from bookflow.application.use_cases.booking_wizard import BookingWizard
from bookflow.application.use_cases.checkout_session import CheckoutSessionOrchestrator
from bookflow.infrastructure.booking_api.memory_gateway import InMemoryBookingGateway
from bookflow.infrastructure.payments.card_element import CardElementMountPoint
from bookflow.infrastructure.payments.mock_payments import MockPaymentGateway

TZ = ZoneInfo("America/Chicago")


class RecordingBookingGateway(InMemoryBookingGateway):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.create_calls: list[tuple[dict[str, Any], bool]] = []
        self.update_calls: list[tuple[str, dict[str, Any]]] = []
        self.fail_create_with: str | None = None

    def create_booking(self, payload: dict[str, Any], admin: bool = False) -> GatewayResult:
        self.create_calls.append((dict(payload), admin))
        if self.fail_create_with:
            return Failure(reason=self.fail_create_with, status_code=500)
        return super().create_booking(payload, admin)

    def update_booking(self, booking_id: str, changes: dict[str, Any]) -> GatewayResult:
        self.update_calls.append((booking_id, dict(changes)))
        return super().update_booking(booking_id, changes)


class RecordingPaymentGateway(MockPaymentGateway):
    def __init__(self) -> None:
        super().__init__()
        self.calls: list[dict[str, Any]] = []
        self.fail_with: str | None = None

    def create_checkout_session(self, amount, description, metadata, success_url, cancel_url, admin=False):
        self.calls.append(
            {"amount": amount, "description": description, "metadata": dict(metadata), "admin": admin}
        )
        if self.fail_with:
            return Failure(reason=self.fail_with, status_code=502)
        return super().create_checkout_session(amount, description, metadata, success_url, cancel_url, admin)


def booking_day(days_ahead: int = 3) -> date:
    return datetime.now(TZ).date() + timedelta(days=days_ahead)


@pytest.fixture
def bookings() -> RecordingBookingGateway:
    return RecordingBookingGateway(times=("14:00",))


@pytest.fixture
def payments() -> RecordingPaymentGateway:
    return RecordingPaymentGateway()


@pytest.fixture
def mount() -> CardElementMountPoint:
    return CardElementMountPoint("test")


def make_checkout(payments, admin: bool = False) -> CheckoutSessionOrchestrator:
    return CheckoutSessionOrchestrator(
        gateway=payments,
        success_url="http://test/payments/success?session_id={CHECKOUT_SESSION_ID}",
        cancel_url="http://test/payments/cancel?session_id={CHECKOUT_SESSION_ID}",
        checkout_base_url="https://checkout.example/pay",
        admin_initiated=admin,
    )


@pytest.fixture
def make_wizard(bookings, payments, mount):
    def _make(**kwargs: Any) -> BookingWizard:
        wizard = BookingWizard(
            pricing=kwargs.pop("pricing", bookings),
            availability=kwargs.pop("availability", bookings),
            bookings=kwargs.pop("bookings", bookings),
            checkout=make_checkout(payments, admin=kwargs.get("admin", False)),
            card_element=kwargs.pop("card_element", mount),
            timezone=TZ,
            practitioner_name="Dr. Test",
            **kwargs,
        )
        wizard.open()
        return wizard

    return _make


@pytest.fixture
def make_editor(bookings, payments, mount):
    def _make(**kwargs: Any) -> AdminBookingEditor:
        return AdminBookingEditor(
            bookings=kwargs.pop("bookings", bookings),
            checkout=make_checkout(payments, admin=True),
            card_element=kwargs.pop("card_element", mount),
            practitioner_name="Dr. Test",
            **kwargs,
        )

    return _make


def walk_to_summary(wizard: BookingWizard, method: str = "cash", tip: str = "0") -> None:
    day = booking_day()
    wizard.select_service("90min")
    wizard.select_date_time(day, "14:00")
    wizard.submit_contact_info("Jamie Rivera", "jamie@example.com", "(940) 268-5999")
    wizard.select_payment_method(method, tip)
