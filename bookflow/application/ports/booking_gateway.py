from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Any

from bookflow.application.dto.gateway_result import GatewayResult


class PricingGatewayPort(ABC):
    @abstractmethod
    def get_session_pricing(self) -> GatewayResult:
        """Fetch the service catalog. Success data is a list of ServiceCatalogEntry."""
        raise NotImplementedError

    @abstractmethod
    def get_addons(self) -> GatewayResult:
        """Fetch add-ons. Success data is a list of Addon."""
        raise NotImplementedError


class AvailabilityGatewayPort(ABC):
    @abstractmethod
    def get_availability(self, day: date) -> GatewayResult:
        """Fetch slots for a day. Success data is a list of AvailabilitySlot."""
        raise NotImplementedError

    @abstractmethod
    def get_closed_dates(self, start: date, end: date) -> GatewayResult:
        """Fetch closed dates in [start, end]. Success data is a set of date."""
        raise NotImplementedError


class BookingGatewayPort(ABC):
    @abstractmethod
    def create_booking(self, payload: dict[str, Any], admin: bool = False) -> GatewayResult:
        """Create a booking. Public and admin creation are distinct endpoints.
        Success data is the booking dict (always carrying ``id``)."""
        raise NotImplementedError

    @abstractmethod
    def get_booking(self, booking_id: str) -> GatewayResult:
        """Fetch an existing booking (admin scope)."""
        raise NotImplementedError

    @abstractmethod
    def update_booking(self, booking_id: str, changes: dict[str, Any]) -> GatewayResult:
        """Update an existing booking (admin scope). Success data is the updated booking dict."""
        raise NotImplementedError

    @abstractmethod
    def delete_booking(self, booking_id: str) -> GatewayResult:
        """Delete a booking (admin scope). Deleting is idempotent on the remote side."""
        raise NotImplementedError
