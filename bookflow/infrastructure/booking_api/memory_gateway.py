from __future__ import annotations

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Any

from bookflow.application.dto.gateway_result import Failure, GatewayResult, Success
from bookflow.application.ports.booking_gateway import (
    AvailabilityGatewayPort,
    BookingGatewayPort,
    PricingGatewayPort,
)
from bookflow.domain.entities.availability import AvailabilitySlot
from bookflow.domain.entities.service_catalog import Addon, ServiceCatalogEntry

DEFAULT_SERVICES = [
    ServiceCatalogEntry("consultation", "Initial Consultation", 30, Decimal("70.00")),
    ServiceCatalogEntry("60min", "60-Minute Reset", 60, Decimal("145.00")),
    ServiceCatalogEntry("90min", "90-Minute Integrative Fascia", 90, Decimal("190.00")),
    ServiceCatalogEntry("120min", "120-Minute Deep Transformation", 120, Decimal("235.00")),
]

DEFAULT_ADDONS = [
    Addon("reflexology", "Reflexology", Decimal("25.00"), 15, ("60min", "90min", "120min")),
    Addon("aromatherapy", "Aromatherapy", Decimal("15.00"), 0),
]

DEFAULT_TIMES = ("10:00", "11:30", "13:00", "14:30", "16:00")


class InMemoryBookingGateway(PricingGatewayPort, AvailabilityGatewayPort, BookingGatewayPort):
    """Booking API stand-in for dev/local runs. Booked times drop out of availability."""

    def __init__(
        self,
        services: list[ServiceCatalogEntry] | None = None,
        addons: list[Addon] | None = None,
        times: tuple[str, ...] = DEFAULT_TIMES,
        closed_dates: set[date] | None = None,
    ) -> None:
        self._services = list(services if services is not None else DEFAULT_SERVICES)
        self._addons = list(addons if addons is not None else DEFAULT_ADDONS)
        self._times = times
        self._closed_dates = set(closed_dates or ())
        self.bookings: dict[str, dict[str, Any]] = {}
        self._logger = logging.getLogger(__name__)

    def get_session_pricing(self) -> GatewayResult:
        return Success(data=list(self._services))

    def get_addons(self) -> GatewayResult:
        return Success(data=list(self._addons))

    def get_availability(self, day: date) -> GatewayResult:
        if day in self._closed_dates:
            return Success(data=[])
        taken = {
            b["scheduled_time"]
            for b in self.bookings.values()
            if b.get("scheduled_date") == day.isoformat()
        }
        return Success(data=[AvailabilitySlot(date=day, time=t, is_available=t not in taken) for t in self._times])

    def get_closed_dates(self, start: date, end: date) -> GatewayResult:
        return Success(data={d for d in self._closed_dates if start <= d <= end})

    def create_booking(self, payload: dict[str, Any], admin: bool = False) -> GatewayResult:
        booking_id = f"bk_{uuid.uuid4().hex[:12]}"
        booking = dict(payload, id=booking_id)
        self.bookings[booking_id] = booking
        self._logger.info("Mock booking created", extra={"booking_id": booking_id})
        return Success(data=dict(booking), status_code=201)

    def get_booking(self, booking_id: str) -> GatewayResult:
        booking = self.bookings.get(booking_id)
        if booking is None:
            return Failure(reason="HTTP 404: Booking not found", status_code=404)
        return Success(data=dict(booking))

    def update_booking(self, booking_id: str, changes: dict[str, Any]) -> GatewayResult:
        booking = self.bookings.get(booking_id)
        if booking is None:
            return Failure(reason="HTTP 404: Booking not found", status_code=404)
        booking.update(changes)
        return Success(data=dict(booking))

    def delete_booking(self, booking_id: str) -> GatewayResult:
        if self.bookings.pop(booking_id, None) is None:
            return Failure(reason="HTTP 404: Booking not found", status_code=404)
        self._logger.info("Mock booking deleted", extra={"booking_id": booking_id})
        return Success(status_code=204)
