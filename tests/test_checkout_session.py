from __future__ import annotations

from decimal import Decimal

import pytest

from bookflow.application.exceptions import PaymentVerificationError, SessionCreationError, StaleSessionError
from bookflow.application.dto.gateway_result import Failure, Success
from bookflow.application.use_cases.checkout_session import ClientInfo
from bookflow.domain.entities.payment import PaymentIntentStatus

from conftest import make_checkout

CLIENT = ClientInfo(name="Jamie Rivera", email="jamie@example.com")


def test_second_session_invalidates_the_first(payments):
    checkout = make_checkout(payments)

    first = checkout.create_session("bk_1", Decimal("190.00"), CLIENT)
    second = checkout.create_session("bk_1", Decimal("190.00"), CLIENT)

    assert first.status is PaymentIntentStatus.failed
    assert checkout.active_session("bk_1") is second
    with pytest.raises(StaleSessionError):
        checkout.complete(first.external_session_id)


def test_sessions_for_different_bookings_are_independent(payments):
    checkout = make_checkout(payments)
    a = checkout.create_session("bk_1", Decimal("50"), CLIENT)
    b = checkout.create_session("bk_2", Decimal("60"), CLIENT)
    assert checkout.active_session("bk_1") is a
    assert checkout.active_session("bk_2") is b


def test_metadata_and_amount_are_sent(payments):
    checkout = make_checkout(payments)
    checkout.create_session("bk_1", Decimal("195.00"), CLIENT)
    call = payments.calls[0]
    assert call["amount"] == 195.0
    assert call["metadata"] == {
        "booking_id": "bk_1",
        "client_name": "Jamie Rivera",
        "client_email": "jamie@example.com",
    }
    assert call["admin"] is False


def test_redirect_defaults_to_checkout_base_url(payments):
    checkout = make_checkout(payments)
    ref = checkout.create_session("bk_1", Decimal("10"), CLIENT)
    redirect = checkout.redirect(ref.external_session_id)
    assert redirect.url == f"https://checkout.example/pay/{ref.external_session_id}"
    assert ref.status is PaymentIntentStatus.redirected


def test_provider_url_wins_over_base_url(payments):
    payments.create_checkout_session = lambda **kw: Success(
        data={"session_id": "cs_1", "url": "https://pay.example/cs_1"}
    )
    checkout = make_checkout(payments)
    ref = checkout.create_session("bk_1", Decimal("10"), CLIENT)
    assert ref.external_session_id == "cs_1"
    assert checkout.redirect("cs_1").url == "https://pay.example/cs_1"


def test_failure_and_missing_session_id_raise(payments):
    checkout = make_checkout(payments)
    payments.fail_with = "HTTP 502: upstream"
    with pytest.raises(SessionCreationError):
        checkout.create_session("bk_1", Decimal("10"), CLIENT)
    assert checkout.active_session("bk_1") is None

    payments.create_checkout_session = lambda **kw: Success(data={})
    with pytest.raises(SessionCreationError):
        checkout.create_session("bk_1", Decimal("10"), CLIENT)


def test_cancel_closes_the_session(payments):
    checkout = make_checkout(payments)
    ref = checkout.create_session("bk_1", Decimal("10"), CLIENT)
    checkout.cancel(ref.external_session_id)
    assert ref.status is PaymentIntentStatus.failed
    assert checkout.active_session("bk_1") is None


@pytest.mark.parametrize(
    "body, paid",
    [
        ({"success": True, "data": {"payment_status": "paid"}}, True),
        ({"success": True, "data": {"status": "Complete"}}, True),
        ({"payment_status": "unpaid"}, False),
        ({"success": True, "data": {}}, False),
    ],
)
def test_verify_reads_provider_payment_status(payments, body, paid):
    checkout = make_checkout(payments)
    ref = checkout.create_session("bk_1", Decimal("10"), CLIENT)
    payments.get_payment_status = lambda sid: Success(data=body)

    assert checkout.verify(ref.external_session_id) is paid


def test_verify_unreachable_provider_raises(payments):
    checkout = make_checkout(payments)
    ref = checkout.create_session("bk_1", Decimal("10"), CLIENT)
    payments.get_payment_status = lambda sid: Failure(reason="HTTP 503", status_code=503)

    with pytest.raises(PaymentVerificationError):
        checkout.verify(ref.external_session_id)
    assert checkout.active_session("bk_1") is ref


def test_verify_unknown_session_is_stale(payments):
    with pytest.raises(StaleSessionError):
        make_checkout(payments).verify("cs_unknown")
