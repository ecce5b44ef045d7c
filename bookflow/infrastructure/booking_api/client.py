from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from bookflow.application.dto.gateway_result import Failure, GatewayResult, Success
from bookflow.application.ports.booking_gateway import (
    AvailabilityGatewayPort,
    BookingGatewayPort,
    PricingGatewayPort,
)
from bookflow.application.utils.time_format import parse_iso_date
from bookflow.core.config import settings
from bookflow.domain.entities.service_catalog import Addon, ServiceCatalogEntry
from bookflow.infrastructure.booking_api.slots import normalize_slots


def _price(value: Any) -> Decimal:
    try:
        return Decimal(str(value)).quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError):
        return Decimal("0.00")


def _error_reason(resp: httpx.Response) -> str:
    if resp.status_code in (401, 403):
        return "admin access denied"
    try:
        body = resp.json()
    except ValueError:
        return f"HTTP {resp.status_code}"
    if isinstance(body, dict):
        message = body.get("error") or body.get("message")
        if isinstance(message, dict):
            message = message.get("message")
        if message:
            return f"HTTP {resp.status_code}: {message}"
    return f"HTTP {resp.status_code}"


class BookingApiClient(PricingGatewayPort, AvailabilityGatewayPort, BookingGatewayPort):
    """httpx client for the hosted booking API. Every call returns a Success or Failure."""

    def __init__(
        self,
        base_url: str | None = None,
        admin_token: str | None = None,
        admin_header: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = (base_url or settings.BOOKING_API_BASE_URL or "").rstrip("/")
        self._admin_token = admin_token if admin_token is not None else settings.ADMIN_ACCESS_TOKEN
        self._admin_header = admin_header or settings.ADMIN_ACCESS_HEADER
        self._client = client or httpx.Client(timeout=timeout or settings.HTTP_TIMEOUT_SECONDS)
        self._logger = logging.getLogger(__name__)

        if not self._base_url:
            raise ValueError("BOOKING_API_BASE_URL is required for the booking API client")

    def _headers(self, admin: bool) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if admin and self._admin_token:
            headers[self._admin_header] = self._admin_token
        return headers

    def _request(
        self,
        method: str,
        path: str,
        admin: bool = False,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> GatewayResult:
        url = f"{self._base_url}/{path.lstrip('/')}"
        try:
            resp = self._client.request(method, url, params=params, json=json, headers=self._headers(admin))
        except httpx.HTTPError as e:
            self._logger.error("Booking API unreachable", extra={"reason": f"{method} {path}: {e}"})
            return Failure(reason=f"Booking service unreachable: {e}")

        if resp.status_code >= 400:
            reason = _error_reason(resp)
            self._logger.error(
                "Booking API error",
                extra={"status": resp.status_code, "reason": f"{method} {path}: {reason}"},
            )
            return Failure(reason=reason, status_code=resp.status_code)

        if not resp.content:
            return Success(data={}, status_code=resp.status_code)
        try:
            body = resp.json()
        except ValueError:
            return Failure(reason="Booking service returned invalid JSON", status_code=resp.status_code)

        if isinstance(body, dict) and body.get("success") is False:
            message = body.get("error") or body.get("message") or "request rejected"
            return Failure(reason=str(message), status_code=resp.status_code)
        return Success(data=body, status_code=resp.status_code)

    # -- pricing --------------------------------------------------------

    def get_session_pricing(self) -> GatewayResult:
        result = self._request("GET", "pricing/sessions")
        if not result.ok:
            return result

        data = result.data.get("data") if isinstance(result.data, dict) else None
        if not isinstance(data, dict) or not data:
            return Failure(reason="Pricing response has no sessions", status_code=result.status_code)

        entries = [
            ServiceCatalogEntry(
                service_key=key,
                name=session.get("name") or session.get("title") or key,
                duration_minutes=int(session.get("duration") or 0),
                price=_price(session.get("price", session.get("webPrice"))),
                description=session.get("description"),
            )
            for key, session in data.items()
            if isinstance(session, dict)
        ]
        return Success(data=entries, status_code=result.status_code)

    def get_addons(self) -> GatewayResult:
        result = self._request("GET", "pricing/addons")
        if not result.ok:
            return result

        data = result.data.get("data") if isinstance(result.data, dict) else None
        if not isinstance(data, list):
            return Failure(reason="Add-on response has no list", status_code=result.status_code)

        addons = [
            Addon(
                addon_id=str(item.get("id")),
                name=item.get("name") or str(item.get("id")),
                price=_price(item.get("price")),
                duration_adjustment=int(item.get("duration_adjustment") or 0),
                available_for=tuple(item.get("available_for") or ()),
            )
            for item in data
            if isinstance(item, dict) and item.get("id")
        ]
        return Success(data=addons, status_code=result.status_code)

    # -- availability ---------------------------------------------------

    def get_availability(self, day: date) -> GatewayResult:
        result = self._request("GET", "bookings/availability", params={"date": day.isoformat()})
        if not result.ok:
            return result

        body = result.data if isinstance(result.data, dict) else {}
        raw = body.get("availableSlots")
        if raw is None and isinstance(body.get("data"), dict):
            raw = body["data"].get("availableSlots") or body["data"].get("slots")
        return Success(data=normalize_slots(day, raw), status_code=result.status_code)

    def get_closed_dates(self, start: date, end: date) -> GatewayResult:
        result = self._request(
            "GET",
            "web-booking/closed-dates",
            params={"start_date": start.isoformat(), "end_date": end.isoformat()},
        )
        if not result.ok:
            return result

        body = result.data if isinstance(result.data, dict) else {}
        raw = (body.get("data") or {}).get("closed_dates") or []
        closed: set[date] = set()
        for value in raw:
            try:
                closed.add(parse_iso_date(str(value)))
            except ValueError:
                continue
        return Success(data=closed, status_code=result.status_code)

    # -- bookings -------------------------------------------------------

    def _booking_from(self, result: GatewayResult) -> GatewayResult:
        if not result.ok:
            return result
        body = result.data if isinstance(result.data, dict) else {}
        booking = body.get("booking") or body.get("data") or body
        if not isinstance(booking, dict):
            return Failure(reason="Booking response has no booking", status_code=result.status_code)
        return Success(data=booking, status_code=result.status_code)

    def create_booking(self, payload: dict[str, Any], admin: bool = False) -> GatewayResult:
        path = "admin/bookings" if admin else "bookings"
        result = self._booking_from(self._request("POST", path, admin=admin, json=payload))
        if result.ok and not result.data.get("id"):
            return Failure(reason="Booking response has no id", status_code=result.status_code)
        if result.ok:
            self._logger.info("Booking created", extra={"booking_id": result.data["id"]})
        return result

    def get_booking(self, booking_id: str) -> GatewayResult:
        return self._booking_from(self._request("GET", f"admin/bookings/{booking_id}", admin=True))

    def update_booking(self, booking_id: str, changes: dict[str, Any]) -> GatewayResult:
        result = self._booking_from(self._request("PUT", f"admin/bookings/{booking_id}", admin=True, json=changes))
        if result.ok:
            self._logger.info("Booking updated", extra={"booking_id": booking_id})
        return result

    def delete_booking(self, booking_id: str) -> GatewayResult:
        result = self._request("DELETE", f"bookings/{booking_id}", admin=True)
        if result.ok:
            self._logger.info("Booking deleted", extra={"booking_id": booking_id})
        return result
