from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, Callable, Iterable
from zoneinfo import ZoneInfo

from bookflow.application.dto.gateway_result import GatewayResult
from bookflow.application.exceptions import (
    AvailabilityUnavailableError,
    ValidationError,
    WizardStateError,
)
from bookflow.application.ports.booking_gateway import (
    AvailabilityGatewayPort,
    BookingGatewayPort,
    PricingGatewayPort,
)
from bookflow.application.ports.card_element import CardElementPort
from bookflow.application.use_cases.checkout_session import CheckoutSessionOrchestrator
from bookflow.application.use_cases.payment_flow import PaymentFlow, serialized
from bookflow.application.use_cases.payment_resolver import PaymentResolution
from bookflow.application.use_cases.pricing import PriceTable
from bookflow.application.utils.contact_validation import validate_contact_info
from bookflow.application.utils.time_format import normalize_time, parse_iso_date
from bookflow.domain.entities.availability import AvailabilitySlot
from bookflow.domain.entities.booking_draft import BookingDraft
from bookflow.domain.entities.payment import PaymentMethod, PaymentStatus
from bookflow.domain.entities.wizard_state import EDITABLE_STEPS, WizardStep


class BookingWizard(PaymentFlow):
    """
    Public booking wizard:
    ServiceSelection -> DateTimeSelection -> ContactInfo -> PaymentMethod -> Summary
    -> Submitting -> Confirmed | Failed.

    Each step validates its own input before the next one becomes reachable.
    """

    steps = EDITABLE_STEPS

    def __init__(
        self,
        pricing: PricingGatewayPort,
        availability: AvailabilityGatewayPort,
        bookings: BookingGatewayPort,
        checkout: CheckoutSessionOrchestrator,
        card_element: CardElementPort,
        timezone: ZoneInfo,
        practitioner_name: str,
        booking_window_days: int = 90,
        admin: bool = False,
        activation_id: str | None = None,
        on_release: Callable[[], None] | None = None,
    ) -> None:
        super().__init__(checkout, card_element, practitioner_name, activation_id, on_release)
        self._pricing = pricing
        self._availability = availability
        self._bookings = bookings
        self._timezone = timezone
        self._booking_window_days = booking_window_days
        self._admin = admin
        self.price_table: PriceTable | None = None
        self._closed_dates: set[date] = set()
        self._slots_date: date | None = None
        self._slots: list[AvailabilitySlot] = []

    def _today(self) -> date:
        return datetime.now(self._timezone).date()

    @serialized
    def open(self) -> None:
        """Start (or restart) the wizard with a fresh draft and an up-to-date price table."""
        if self.step is WizardStep.submitting:
            raise WizardStateError("Cannot reopen while a booking is being submitted")
        self._require_unrecorded_payment_settled()
        self._release_payment_ui()

        self.price_table = PriceTable.load(self._pricing)

        today = self._today()
        closed = self._availability.get_closed_dates(today, today + timedelta(days=self._booking_window_days))
        if closed.ok:
            self._closed_dates = set(closed.data or ())
        else:
            self._logger.warning(
                "Closed dates unavailable; relying on slot availability",
                extra={"wizard_id": self.activation_id, "reason": closed.reason},
            )
            self._closed_dates = set()

        self.draft = BookingDraft()
        self.confirmation = None
        self.payment_intent = None
        self.error = None
        self._slots_date = None
        self._slots = []
        self._enter(WizardStep.service_selection)
        self._logger.info("Wizard opened", extra={"wizard_id": self.activation_id})

    # -- ServiceSelection -----------------------------------------------

    @serialized
    def select_service(self, service_type: str, addons: Iterable[str] = ()) -> None:
        self._require(WizardStep.service_selection)
        key = (service_type or "").strip()
        if not key:
            raise ValidationError({"service_type": "Choose a service."})

        addon_ids = tuple(addons or ())
        total = self.price_table.base_price(key, addon_ids)
        self.draft.update(service_type=key, addons=addon_ids, total_price=total)
        self._enter(WizardStep.date_time_selection)

    # -- DateTimeSelection ----------------------------------------------

    def _validate_date(self, day: date) -> None:
        today = self._today()
        if day < today:
            raise ValidationError({"scheduled_date": "Choose a date that is not in the past."})
        if day > today + timedelta(days=self._booking_window_days):
            raise ValidationError(
                {"scheduled_date": f"Bookings open up to {self._booking_window_days} days ahead."}
            )
        if day in self._closed_dates:
            raise ValidationError({"scheduled_date": "This date is closed. Please choose an available date."})

    @serialized
    def load_availability(self, day: date | str) -> list[AvailabilitySlot]:
        self._require(WizardStep.date_time_selection)
        try:
            parsed = parse_iso_date(day)
        except ValueError:
            raise ValidationError({"scheduled_date": "Use the YYYY-MM-DD format."})
        self._validate_date(parsed)

        result = self._availability.get_availability(parsed)
        if not result.ok:
            self._logger.error(
                "Availability fetch failed",
                extra={"wizard_id": self.activation_id, "status": result.status_code, "reason": result.reason},
            )
            raise AvailabilityUnavailableError(result.reason)

        self._slots_date = parsed
        self._slots = list(result.data or [])
        return list(self._slots)

    def available_times(self) -> list[str]:
        return [s.time for s in self._slots if s.is_available]

    @serialized
    def select_date_time(self, day: date | str, time: str) -> None:
        self._require(WizardStep.date_time_selection)
        try:
            parsed = parse_iso_date(day)
        except ValueError:
            raise ValidationError({"scheduled_date": "Use the YYYY-MM-DD format."})

        if self._slots_date != parsed:
            self.load_availability(parsed)

        open_times = self.available_times()
        if not open_times:
            raise ValidationError({"scheduled_date": "No available times on this date."})

        normalized = normalize_time(time or "")
        if normalized is None or normalized not in open_times:
            raise ValidationError({"scheduled_time": "Choose one of the available times."})

        self.draft.update(scheduled_date=parsed, scheduled_time=normalized)
        self._enter(WizardStep.contact_info)

    # -- ContactInfo ----------------------------------------------------

    @serialized
    def submit_contact_info(
        self,
        client_name: str | None,
        client_email: str | None,
        client_phone: str | None,
        special_requests: str | None = None,
    ) -> None:
        self._require(WizardStep.contact_info)
        errors = validate_contact_info(client_name, client_email, client_phone)

        # Valid fields stick even when a sibling field fails
        if "client_name" not in errors:
            self.draft.update(client_name=client_name.strip())
        if "client_email" not in errors:
            self.draft.update(client_email=client_email.strip().lower())
        if "client_phone" not in errors:
            self.draft.update(client_phone=client_phone.strip())
        self.draft.update(special_requests=(special_requests or "").strip() or None)

        if errors:
            raise ValidationError(errors)

        self._enter(WizardStep.payment_method)
        self._mount_payment_ui()

    # -- completion -----------------------------------------------------

    def _service_display_name(self) -> str:
        entry = self.price_table.get_service(self.draft.service_type) if self.price_table else None
        return entry.name if entry else super()._service_display_name()

    def _booking_payload(self, method: PaymentMethod, status: PaymentStatus) -> dict[str, Any]:
        draft = self.draft
        payload: dict[str, Any] = {
            "client_name": draft.client_name,
            "client_email": draft.client_email,
            "client_phone": draft.client_phone,
            "service_type": draft.service_type,
            "scheduled_date": draft.scheduled_date.isoformat(),
            "scheduled_time": draft.scheduled_time,
            "payment_method": method.value,
            "payment_status": status.value,
            "total_price": float(draft.total_price),
        }
        if draft.special_requests:
            payload["special_requests"] = draft.special_requests
        if draft.addons:
            payload["addons"] = list(draft.addons)
        return self._payment_fields(payload)

    def _complete_direct(self, resolution: PaymentResolution) -> GatewayResult:
        payload = self._booking_payload(resolution.method, resolution.payment_status)
        return self._bookings.create_booking(payload, admin=self._admin)

    def _complete_after_payment(self, session_id: str) -> GatewayResult:
        payload = self._booking_payload(PaymentMethod.card, PaymentStatus.paid)
        payload["stripe_session_id"] = session_id
        return self._bookings.create_booking(payload, admin=self._admin)
