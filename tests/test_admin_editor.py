"""
Tests for editing payment method and tip on an existing booking.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from bookflow.application.exceptions import BookingLookupError, PaymentCancelled
from bookflow.domain.entities.wizard_state import WizardStep

from conftest import booking_day


@pytest.fixture
def booking_id(bookings):
    result = bookings.create_booking(
        {
            "client_name": "Pat Lee",
            "client_email": "pat@example.com",
            "client_phone": "9402685999",
            "service_type": "90min",
            "service_name": "90-Minute Integrative Fascia",
            "scheduled_date": booking_day().isoformat(),
            "scheduled_time": "14:00",
            "payment_method": "cash",
            "payment_status": "unpaid",
            "total_price": 190.0,
        },
        admin=True,
    )
    bookings.create_calls.clear()
    return result.data["id"]


def test_card_with_tip_creates_one_session_for_total_plus_tip(make_editor, booking_id, payments):
    editor = make_editor()
    editor.open(booking_id)
    assert editor.step is WizardStep.payment_method

    editor.select_payment_method("card", "5.00")
    outcome = editor.confirm()

    assert len(payments.calls) == 1
    call = payments.calls[0]
    assert call["amount"] == 195.0
    assert call["admin"] is True
    assert call["metadata"]["booking_id"] == booking_id
    assert call["metadata"]["admin_initiated"] == "true"
    assert outcome.redirect is not None


def test_cancel_keeps_tip_and_lands_in_failed(make_editor, booking_id):
    editor = make_editor()
    editor.open(booking_id)
    editor.select_payment_method("card", "5.00")
    outcome = editor.confirm()

    result = editor.handle_payment_return(outcome.redirect.session_id, succeeded=False)

    assert result.step is WizardStep.failed
    assert isinstance(editor.error, PaymentCancelled)
    assert editor.draft.tip_amount == Decimal("5.00")
    assert editor.draft.booking_id == booking_id


def test_reopening_modal_on_same_mount_point_does_not_raise(make_editor, booking_id, mount):
    first = make_editor()
    first.open(booking_id)
    first.select_payment_method("card", "5.00")
    outcome = first.confirm()
    first.handle_payment_return(outcome.redirect.session_id, succeeded=False)

    second = make_editor()
    second.open(booking_id)

    assert second.step is WizardStep.payment_method
    assert mount.owner == second.activation_id


def test_cash_updates_existing_booking(make_editor, booking_id, bookings, payments):
    editor = make_editor()
    editor.open(booking_id)
    editor.select_payment_method("cash", "10")

    outcome = editor.confirm()

    assert outcome.step is WizardStep.confirmed
    assert payments.calls == []
    assert bookings.create_calls == []
    updated_id, changes = bookings.update_calls[0]
    assert updated_id == booking_id
    assert changes["payment_method"] == "cash"
    assert changes["payment_status"] == "unpaid"
    assert changes["tip_amount"] == 10.0
    assert changes["final_price"] == 200.0
    assert outcome.confirmation.confirmation_number == booking_id
    assert outcome.confirmation.service == "90-Minute Integrative Fascia"


def test_card_success_marks_booking_paid(make_editor, booking_id, bookings):
    editor = make_editor()
    editor.open(booking_id)
    editor.select_payment_method("card")
    outcome = editor.confirm()

    editor.handle_payment_return(outcome.redirect.session_id, succeeded=True)

    assert editor.step is WizardStep.confirmed
    stored = bookings.bookings[booking_id]
    assert stored["payment_status"] == "paid"
    assert stored["stripe_session_id"] == outcome.redirect.session_id


def test_datetime_inside_scheduled_date_is_split(make_editor, bookings):
    booking = bookings.create_booking(
        {"scheduled_date": "2030-07-20T14:00:00", "total_price": "145", "service_type": "60min"}
    ).data
    editor = make_editor()
    editor.open(booking["id"])
    assert editor.draft.scheduled_time == "14:00"
    assert editor.draft.total_price == Decimal("145.00")


def test_unknown_booking_raises_lookup_error(make_editor):
    editor = make_editor()
    with pytest.raises(BookingLookupError):
        editor.open("bk_missing")
    assert editor.step is WizardStep.closed
