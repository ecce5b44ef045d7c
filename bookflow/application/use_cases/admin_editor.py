from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from bookflow.application.dto.gateway_result import GatewayResult
from bookflow.application.exceptions import BookingLookupError, WizardStateError
from bookflow.application.ports.booking_gateway import BookingGatewayPort
from bookflow.application.ports.card_element import CardElementPort
from bookflow.application.use_cases.checkout_session import CheckoutSessionOrchestrator
from bookflow.application.use_cases.payment_flow import PaymentFlow, serialized
from bookflow.application.use_cases.payment_resolver import PaymentResolution
from bookflow.application.utils.time_format import normalize_time, parse_iso_date
from bookflow.domain.entities.booking_draft import BookingDraft
from bookflow.domain.entities.payment import PaymentMethod, PaymentStatus
from bookflow.domain.entities.wizard_state import WizardStep


def _money(value: Any) -> Decimal | None:
    if value in (None, ""):
        return None
    try:
        return Decimal(str(value)).quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError):
        return None


class AdminBookingEditor(PaymentFlow):
    """Payment method / tip editor for a booking that already exists."""

    steps = (WizardStep.payment_method, WizardStep.summary)

    def __init__(
        self,
        bookings: BookingGatewayPort,
        checkout: CheckoutSessionOrchestrator,
        card_element: CardElementPort,
        practitioner_name: str,
        activation_id: str | None = None,
        on_release: Callable[[], None] | None = None,
    ) -> None:
        super().__init__(checkout, card_element, practitioner_name, activation_id, on_release)
        self._bookings = bookings
        self._service_name: str | None = None

    @serialized
    def open(self, booking_id: str) -> None:
        if self.step is WizardStep.submitting:
            raise WizardStateError("Cannot reopen while a payment is in progress")
        self._require_unrecorded_payment_settled()

        result = self._bookings.get_booking(booking_id)
        if not result.ok:
            self._logger.error(
                "Could not load booking for editing",
                extra={"booking_id": booking_id, "status": result.status_code, "reason": result.reason},
            )
            raise BookingLookupError(result.reason)

        self.draft = self._draft_from_booking(booking_id, result.data or {})
        self.confirmation = None
        self.payment_intent = None
        self.error = None
        self._enter(WizardStep.payment_method)
        self._mount_payment_ui()
        self._logger.info("Admin editor opened", extra={"wizard_id": self.activation_id, "booking_id": booking_id})

    def _draft_from_booking(self, booking_id: str, booking: dict[str, Any]) -> BookingDraft:
        raw_date = str(booking.get("scheduled_date") or "")
        raw_time = booking.get("scheduled_time")
        # Some records carry the time inside scheduled_date ("2025-07-20T14:00:00")
        if not raw_time and "T" in raw_date:
            raw_date, raw_time = raw_date.split("T", 1)
        try:
            scheduled_date = parse_iso_date(raw_date)
        except ValueError:
            raise BookingLookupError(f"Booking {booking_id} has no usable scheduled_date")
        scheduled_time = normalize_time(str(raw_time or ""))
        if scheduled_time is None:
            raise BookingLookupError(f"Booking {booking_id} has no usable scheduled_time")

        base = _money(booking.get("base_price"))
        if base is None:
            base = _money(booking.get("total_price"))
        if base is None:
            raise BookingLookupError(f"Booking {booking_id} has no price")

        try:
            method = PaymentMethod(booking.get("payment_method"))
        except ValueError:
            method = None

        self._service_name = booking.get("service_name")
        return BookingDraft(
            service_type=booking.get("service_type"),
            scheduled_date=scheduled_date,
            scheduled_time=scheduled_time,
            client_name=booking.get("client_name"),
            client_email=booking.get("client_email"),
            client_phone=booking.get("client_phone"),
            special_requests=booking.get("special_requests"),
            payment_method=method,
            tip_amount=_money(booking.get("tip_amount")) or Decimal("0.00"),
            total_price=base,
            booking_id=booking_id,
        )

    def _service_display_name(self) -> str:
        return self._service_name or super()._service_display_name()

    def _update_payload(self, method: PaymentMethod, status: PaymentStatus) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "payment_method": method.value,
            "payment_status": status.value,
            "tip_amount": float(self.draft.tip_amount),
        }
        return self._payment_fields(payload)

    def _complete_direct(self, resolution: PaymentResolution) -> GatewayResult:
        return self._bookings.update_booking(
            self.draft.booking_id,
            self._update_payload(resolution.method, resolution.payment_status),
        )

    def _complete_after_payment(self, session_id: str) -> GatewayResult:
        payload = self._update_payload(PaymentMethod.card, PaymentStatus.paid)
        payload["stripe_session_id"] = session_id
        return self._bookings.update_booking(self.draft.booking_id, payload)
