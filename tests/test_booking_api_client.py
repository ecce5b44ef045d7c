"""
HTTP adapter tests against httpx.MockTransport.
"""

from __future__ import annotations

import json
from datetime import date
from decimal import Decimal

import httpx
import pytest

from bookflow.infrastructure.admin_access import verify_admin_access
from bookflow.infrastructure.booking_api.client import BookingApiClient
from bookflow.infrastructure.booking_api.slots import normalize_slots
from bookflow.infrastructure.payments.checkout_client import CheckoutSessionClient

BASE = "https://booking.test/api"
DAY = date(2030, 7, 20)


def make_client(handler, cls=BookingApiClient):
    return cls(
        base_url=BASE,
        admin_token="s3cret",
        admin_header="x-admin-access",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


def test_session_pricing_is_parsed():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/pricing/sessions"
        return httpx.Response(
            200,
            json={"success": True, "data": {"90min": {"name": "90-Minute Integrative Fascia", "duration": 90, "price": 190}}},
        )

    result = make_client(handler).get_session_pricing()

    assert result.ok
    entry = result.data[0]
    assert entry.service_key == "90min"
    assert entry.price == Decimal("190.00")
    assert entry.duration_minutes == 90


def test_addons_are_parsed():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"success": True, "data": [{"id": "reflexology", "name": "Reflexology", "price": "25", "available_for": ["60min"]}]},
        )

    addon = make_client(handler).get_addons().data[0]
    assert addon.addon_id == "reflexology"
    assert addon.is_available_for("60min")
    assert not addon.is_available_for("consultation")


def test_availability_accepts_string_and_object_slots():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["date"] == "2030-07-20"
        return httpx.Response(
            200,
            json={"availableSlots": ["2:00 PM", {"time": "10:00", "available": False}, {"start_time": "11:30:00"}]},
        )

    slots = make_client(handler).get_availability(DAY).data

    assert [(s.time, s.is_available) for s in slots] == [("10:00", False), ("11:30", True), ("14:00", True)]


def test_closed_dates_skip_bad_values():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/web-booking/closed-dates"
        return httpx.Response(200, json={"success": True, "data": {"closed_dates": ["2030-07-04", "bogus"]}})

    assert make_client(handler).get_closed_dates(DAY, DAY).data == {date(2030, 7, 4)}


def test_public_create_sends_no_admin_header():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["header"] = request.headers.get("x-admin-access")
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"success": True, "data": {"id": "bk_1"}})

    result = make_client(handler).create_booking({"payment_method": "cash"})

    assert result.ok and result.data["id"] == "bk_1"
    assert seen == {"path": "/api/bookings", "header": None, "body": {"payment_method": "cash"}}


def test_admin_create_and_update_send_admin_header():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path, request.headers.get("x-admin-access")))
        return httpx.Response(200, json={"booking": {"id": "bk_9"}})

    client = make_client(handler)
    client.create_booking({}, admin=True)
    client.update_booking("bk_9", {"tip_amount": 5.0})

    assert seen == [
        ("POST", "/api/admin/bookings", "s3cret"),
        ("PUT", "/api/admin/bookings/bk_9", "s3cret"),
    ]


def test_create_without_id_is_a_failure():
    client = make_client(lambda request: httpx.Response(200, json={"success": True, "data": {}}))
    result = client.create_booking({})
    assert not result.ok
    assert "no id" in result.reason


@pytest.mark.parametrize(
    "response,reason",
    [
        (httpx.Response(403, json={"error": "nope"}), "admin access denied"),
        (httpx.Response(500, json={"error": "database unavailable"}), "HTTP 500: database unavailable"),
        (httpx.Response(502, text="bad gateway"), "HTTP 502"),
        (httpx.Response(200, json={"success": False, "error": "slot taken"}), "slot taken"),
        (httpx.Response(200, text="<html>"), "Booking service returned invalid JSON"),
    ],
)
def test_errors_become_failures(response, reason):
    result = make_client(lambda request: response).delete_booking("bk_1")
    assert not result.ok
    assert result.reason == reason


def test_transport_error_becomes_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = make_client(handler).get_booking("bk_1")
    assert not result.ok
    assert "unreachable" in result.reason


def test_checkout_client_posts_session_request():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["header"] = request.headers.get("x-admin-access")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"sessionId": "cs_1"})

    result = make_client(handler, CheckoutSessionClient).create_checkout_session(
        amount=195.0,
        description="Payment for Pat Lee",
        metadata={"booking_id": "bk_1", "admin_initiated": "true"},
        success_url="https://app.test/ok",
        cancel_url="https://app.test/cancel",
        admin=True,
    )

    assert result.ok and result.data == {"sessionId": "cs_1"}
    assert seen["path"] == "/api/payments/create-checkout-session"
    assert seen["header"] == "s3cret"
    assert seen["body"]["amount"] == 195.0
    assert seen["body"]["metadata"]["admin_initiated"] == "true"


def test_checkout_client_rejection_is_a_failure():
    client = make_client(lambda request: httpx.Response(400, text="bad"), CheckoutSessionClient)
    result = client.create_checkout_session(10.0, "x", {}, "a", "b")
    assert not result.ok
    assert result.status_code == 400


def test_checkout_client_fetches_payment_status():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert request.url.path == "/api/web-booking/payment-status/cs_1"
        return httpx.Response(200, json={"success": True, "data": {"payment_status": "paid"}})

    result = make_client(handler, CheckoutSessionClient).get_payment_status("cs_1")

    assert result.ok
    assert result.data["data"]["payment_status"] == "paid"


@pytest.mark.parametrize(
    "response",
    [httpx.Response(404, text="no such session"), httpx.Response(200, json={"success": False}), httpx.Response(200, text="<html>")],
)
def test_checkout_client_payment_status_errors_become_failures(response):
    result = make_client(lambda request: response, CheckoutSessionClient).get_payment_status("cs_1")
    assert not result.ok


def test_normalize_slots_dedupes_and_drops_garbage():
    slots = normalize_slots(DAY, ["14:00", "2pm", 42, "later", {"display_time": "9:00 AM", "isAvailable": False}])
    assert [(s.time, s.is_available) for s in slots] == [("09:00", False), ("14:00", True)]


def test_admin_access_check():
    assert verify_admin_access("s3cret", "s3cret", "prod") is None
    assert verify_admin_access(None, "s3cret", "prod") == 401
    assert verify_admin_access("wrong", "s3cret", "prod") == 403
    assert verify_admin_access(None, None, "prod") == 403
    assert verify_admin_access(None, None, "dev") is None
