from __future__ import annotations

import functools
import logging
import threading
import uuid
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from bookflow.application.dto.gateway_result import GatewayResult
from bookflow.application.exceptions import (
    DuplicateSubmissionError,
    PaymentCancelled,
    SessionCreationError,
    StaleSessionError,
    ValidationError,
    WizardStateError,
)
from bookflow.application.ports.card_element import CardElementPort
from bookflow.application.use_cases.checkout_session import (
    CheckoutRedirect,
    CheckoutSessionOrchestrator,
    ClientInfo,
)
from bookflow.application.use_cases.payment_resolver import PaymentResolution, resolve
from bookflow.application.utils.time_format import combine
from bookflow.domain.entities.booking_draft import BookingDraft
from bookflow.domain.entities.confirmation import BookingConfirmation
from bookflow.domain.entities.payment import PaymentIntentRef, PaymentIntentStatus, PaymentMethod
from bookflow.domain.entities.wizard_state import WizardStep


def serialized(method):
    """Run a transition under the activation's lock; requests for one activation arrive on pool threads."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


@dataclass(frozen=True)
class FlowOutcome:
    step: WizardStep
    redirect: CheckoutRedirect | None = None
    confirmation: BookingConfirmation | None = None
    reason: str | None = None


class PaymentFlow:
    """
    Payment half of the booking state machine, shared by the public wizard and the admin editor.

    Owns the draft, the payment-method UI element and the open PaymentIntentRef.
    Subclasses decide what "complete" means: create a booking or update an existing one.

    Once a checkout session is verified as paid its id is kept in ``captured_session_id``
    until the booking write succeeds; retry then repeats only the write.
    """

    steps: tuple[WizardStep, ...] = (WizardStep.payment_method, WizardStep.summary)

    def __init__(
        self,
        checkout: CheckoutSessionOrchestrator,
        card_element: CardElementPort,
        practitioner_name: str,
        activation_id: str | None = None,
        on_release: Callable[[], None] | None = None,
    ) -> None:
        self.activation_id = activation_id or uuid.uuid4().hex
        self.step = WizardStep.closed
        self.draft = BookingDraft()
        self.confirmation: BookingConfirmation | None = None
        self.payment_intent: PaymentIntentRef | None = None
        self.captured_session_id: str | None = None
        self.error: Exception | None = None
        self._checkout = checkout
        self._card_element = card_element
        self._card_element_id: str | None = None
        self._practitioner_name = practitioner_name
        self._on_release = on_release
        self._lock = threading.RLock()
        self._logger = logging.getLogger(type(self).__module__)

    # -- state ----------------------------------------------------------

    @property
    def failure_reason(self) -> str | None:
        return str(self.error) if self.error is not None and self.step is WizardStep.failed else None

    @property
    def can_confirm(self) -> bool:
        return self.step is WizardStep.summary

    @property
    def payment_captured(self) -> bool:
        return self.captured_session_id is not None

    @property
    def card_element_id(self) -> str | None:
        return self._card_element_id

    def _require(self, *allowed: WizardStep) -> None:
        if self.step not in allowed:
            expected = ", ".join(s.value for s in allowed)
            raise WizardStateError(f"Cannot do that from step {self.step.value}; expected {expected}")

    def _require_unrecorded_payment_settled(self) -> None:
        if self.captured_session_id is not None:
            raise WizardStateError(
                f"Payment for checkout session {self.captured_session_id} is not recorded yet; retry first"
            )

    def _enter(self, step: WizardStep) -> None:
        self._logger.debug(
            "Step transition",
            extra={"wizard_id": self.activation_id, "step": f"{self.step.value}->{step.value}"},
        )
        self.step = step

    # -- payment-method UI ----------------------------------------------

    def _mount_payment_ui(self) -> None:
        """Tear down any element on the mount point, then create ours."""
        self._release_payment_ui()
        if self._card_element.live_element() is not None:
            # Left behind by an earlier activation sharing this mount point
            self._card_element.teardown()
        self._card_element_id = self._card_element.mount(self.activation_id)

    def _release_payment_ui(self) -> None:
        if self._card_element_id is not None:
            self._card_element.destroy(self._card_element_id)
            self._card_element_id = None

    def _release_resources(self) -> None:
        if self.payment_intent is not None and self.payment_intent.is_open:
            self._checkout.invalidate(self.payment_intent.booking_ref)
        self.payment_intent = None
        self._release_payment_ui()
        if self._on_release is not None:
            self._on_release()

    # -- transitions ----------------------------------------------------

    @serialized
    def select_payment_method(self, method: PaymentMethod | str, tip_amount: Decimal | float | str = 0) -> None:
        self._require(WizardStep.payment_method)

        errors: dict[str, str] = {}
        try:
            resolved = PaymentMethod(method)
        except ValueError:
            resolved = None
            errors["payment_method"] = "Choose cash or card."

        try:
            tip = Decimal(str(tip_amount if tip_amount not in (None, "") else 0)).quantize(Decimal("0.01"))
        except (InvalidOperation, ValueError):
            tip = None
            errors["tip_amount"] = "Tip must be a number."
        else:
            if tip.is_nan() or tip < 0:
                tip = None
                errors["tip_amount"] = "Tip cannot be negative."

        # Keep whichever half was valid
        if resolved is not None:
            self.draft.update(payment_method=resolved)
        if tip is not None:
            self.draft.update(tip_amount=tip)
        if errors:
            raise ValidationError(errors)

        self._enter(WizardStep.summary)

    @serialized
    def back(self) -> WizardStep:
        self._require(*self.steps)
        index = self.steps.index(self.step)
        if index == 0:
            return self.step
        previous = self.steps[index - 1]
        if self.step is WizardStep.payment_method:
            self._release_payment_ui()
        self._enter(previous)
        return self.step

    @serialized
    def confirm(self) -> FlowOutcome:
        """Explicit confirmation from the summary step. A second call while submitting is rejected."""
        if self.step is WizardStep.submitting:
            raise DuplicateSubmissionError("Booking is already being submitted")
        self._require(WizardStep.summary)

        # InvalidAmountError leaves the wizard on the summary step
        resolution = resolve(self.draft.payment_method, self.draft.amount_due)

        self.draft.lock()
        self.error = None
        self._enter(WizardStep.submitting)
        self._logger.info(
            "Submitting booking",
            extra={"wizard_id": self.activation_id, "method": resolution.method.value},
        )

        if not resolution.requires_redirect:
            self.payment_intent = PaymentIntentRef(
                method=resolution.method,
                booking_ref=self._booking_ref(),
                amount=resolution.amount,
            )
            return self._finish(self._complete_direct(resolution))

        try:
            self.payment_intent = self._checkout.create_session(
                self._booking_ref(),
                resolution.amount,
                ClientInfo(
                    name=self.draft.client_name or "",
                    email=self.draft.client_email or "",
                    phone=self.draft.client_phone,
                ),
            )
            redirect = self._checkout.redirect(self.payment_intent.external_session_id)
        except SessionCreationError as e:
            return self._fail(e)
        return FlowOutcome(step=self.step, redirect=redirect)

    @serialized
    def handle_payment_return(self, session_id: str, succeeded: bool) -> FlowOutcome:
        """
        Resume after the hosted checkout page sends the client back.
        A success return is checked with the payment provider before anything is written as paid;
        PaymentVerificationError leaves the flow in Submitting so the return can be replayed.
        """
        intent = self.payment_intent
        if (
            self.step is not WizardStep.submitting
            or intent is None
            or intent.external_session_id != session_id
        ):
            self._logger.warning(
                "Ignoring return for inactive checkout session",
                extra={"wizard_id": self.activation_id, "session_id": session_id},
            )
            raise StaleSessionError(f"Checkout session {session_id!r} is not active for this booking")

        if not succeeded:
            self._checkout.cancel(session_id)
            return self._fail(PaymentCancelled("Payment was cancelled. You can pick another method or try again."))

        if not self._checkout.verify(session_id):
            self._checkout.cancel(session_id)
            return self._fail(PaymentCancelled("Payment was not completed. You can pick another method or try again."))

        self._checkout.complete(session_id)
        self.captured_session_id = session_id
        return self._finish(self._complete_after_payment(session_id))

    @serialized
    def retry(self) -> FlowOutcome:
        """
        From Failed back to payment method selection with everything the client entered.
        If the payment was already taken, only the booking write is repeated.
        """
        self._require(WizardStep.failed)

        if self.captured_session_id is not None:
            self.draft.lock()
            self.error = None
            self._enter(WizardStep.submitting)
            self._logger.info(
                "Retrying booking write for captured payment",
                extra={"wizard_id": self.activation_id, "session_id": self.captured_session_id},
            )
            return self._finish(self._complete_after_payment(self.captured_session_id))

        self.draft.unlock()
        self._enter(WizardStep.payment_method)
        self._mount_payment_ui()
        return FlowOutcome(step=self.step)

    @serialized
    def close(self) -> None:
        if self.step is WizardStep.submitting:
            raise WizardStateError("Cannot close while a booking is being submitted")
        self._require_unrecorded_payment_settled()
        self._release_resources()
        self.draft.clear()
        self._enter(WizardStep.closed)
        self._logger.info("Wizard closed", extra={"wizard_id": self.activation_id})

    @serialized
    def dispose(self) -> None:
        """Release the card element and any open checkout session without touching the step."""
        if self.captured_session_id is not None:
            self._logger.error(
                "Discarding activation with a captured payment that has no booking",
                extra={"wizard_id": self.activation_id, "session_id": self.captured_session_id},
            )
        self._release_resources()

    # -- completion -----------------------------------------------------

    def _finish(self, result: GatewayResult) -> FlowOutcome:
        if not result.ok:
            self._logger.error(
                "Booking submission failed",
                extra={"wizard_id": self.activation_id, "status": result.status_code, "reason": result.reason},
            )
            if self.captured_session_id is not None:
                return self._fail(
                    RuntimeError(f"Payment received, but we couldn't save your booking: {result.reason}")
                )
            return self._fail(RuntimeError(f"We couldn't complete your booking: {result.reason}"))

        booking = result.data or {}
        number = booking.get("confirmation_number") or booking.get("id") or self.draft.booking_id
        if not number:
            return self._fail(RuntimeError("Booking service returned no confirmation number"))

        self.confirmation = BookingConfirmation(
            service=booking.get("service_name") or self._service_display_name(),
            datetime=combine(self.draft.scheduled_date, self.draft.scheduled_time),
            practitioner=booking.get("practitioner_name") or self._practitioner_name,
            confirmation_number=str(number),
            total_amount=self.draft.amount_due,
            client_name=self.draft.client_name,
            payment_method=self.draft.payment_method.value if self.draft.payment_method else None,
        )
        if self.payment_intent is not None:
            self.payment_intent.status = PaymentIntentStatus.confirmed
        self.payment_intent = None
        self.captured_session_id = None
        self._release_resources()
        self.draft.clear()
        self._enter(WizardStep.confirmed)
        self._logger.info(
            "Booking confirmed",
            extra={"wizard_id": self.activation_id, "booking_id": self.confirmation.confirmation_number},
        )
        return FlowOutcome(step=self.step, confirmation=self.confirmation)

    def _fail(self, error: Exception) -> FlowOutcome:
        if self.payment_intent is not None and self.payment_intent.is_open:
            self._checkout.invalidate(self.payment_intent.booking_ref)
            self.payment_intent.status = PaymentIntentStatus.failed
        self.payment_intent = None
        self.error = error
        self.draft.unlock()
        self._enter(WizardStep.failed)
        self._logger.warning("Booking failed", extra={"wizard_id": self.activation_id, "reason": str(error)})
        return FlowOutcome(step=self.step, reason=str(error))

    # -- hooks ----------------------------------------------------------

    def _booking_ref(self) -> str:
        return self.draft.booking_id or self.draft.draft_id

    def _service_display_name(self) -> str:
        return self.draft.service_type or "Appointment"

    def _complete_direct(self, resolution: PaymentResolution) -> GatewayResult:
        raise NotImplementedError

    def _complete_after_payment(self, session_id: str) -> GatewayResult:
        raise NotImplementedError

    def _payment_fields(self, payload: dict[str, Any]) -> dict[str, Any]:
        tip = self.draft.tip_amount
        if tip:
            payload["tip_amount"] = float(tip)
        payload["final_price"] = float(self.draft.amount_due)
        return payload
