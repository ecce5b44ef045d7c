from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from bookflow.application.exceptions import (
    PaymentVerificationError,
    SessionCreationError,
    StaleSessionError,
)
from bookflow.application.ports.payment_gateway import PaymentGatewayPort
from bookflow.domain.entities.payment import PaymentIntentRef, PaymentIntentStatus, PaymentMethod


PAID_STATUSES = frozenset({"paid", "succeeded", "complete"})


def _session_status(body: Any) -> str | None:
    """Status from ``{success, data: {status}}`` or a flat ``{status|payment_status}`` body."""
    if not isinstance(body, dict):
        return None
    data = body.get("data") if isinstance(body.get("data"), dict) else body
    status = data.get("payment_status") or data.get("status")
    return str(status).lower() if status else None


@dataclass(frozen=True)
class ClientInfo:
    name: str
    email: str
    phone: str | None = None


@dataclass(frozen=True)
class CheckoutRedirect:
    session_id: str
    url: str


class CheckoutSessionOrchestrator:
    """
    Creates hosted checkout sessions and tracks the one open PaymentIntentRef per booking ref.
    The provider fills ``{CHECKOUT_SESSION_ID}`` in the return URLs.
    """

    def __init__(
        self,
        gateway: PaymentGatewayPort,
        success_url: str,
        cancel_url: str,
        checkout_base_url: str,
        admin_initiated: bool = False,
    ) -> None:
        self._gateway = gateway
        self._success_url = success_url
        self._cancel_url = cancel_url
        self._checkout_base_url = checkout_base_url.rstrip("/")
        self._admin_initiated = admin_initiated
        self._active: dict[str, PaymentIntentRef] = {}
        self._logger = logging.getLogger(__name__)

    def active_session(self, booking_ref: str) -> PaymentIntentRef | None:
        ref = self._active.get(booking_ref)
        if ref is not None and ref.is_open:
            return ref
        return None

    def invalidate(self, booking_ref: str) -> PaymentIntentRef | None:
        ref = self._active.pop(booking_ref, None)
        if ref is not None and ref.is_open:
            ref.status = PaymentIntentStatus.failed
            self._logger.info(
                "Checkout session invalidated",
                extra={"booking_id": booking_ref, "session_id": ref.external_session_id},
            )
        return ref

    def create_session(self, booking_ref: str, amount: Decimal, client: ClientInfo) -> PaymentIntentRef:
        # A second session for the same booking replaces the first, never runs beside it
        self.invalidate(booking_ref)

        ref = PaymentIntentRef(method=PaymentMethod.card, booking_ref=booking_ref, amount=amount)
        self._active[booking_ref] = ref

        metadata = {
            "booking_id": booking_ref,
            "client_name": client.name,
            "client_email": client.email,
        }
        if self._admin_initiated:
            metadata["admin_initiated"] = "true"

        result = self._gateway.create_checkout_session(
            amount=float(amount),
            description=f"Payment for {client.name}",
            metadata=metadata,
            success_url=self._success_url,
            cancel_url=self._cancel_url,
            admin=self._admin_initiated,
        )
        if not result.ok:
            self._fail(ref)
            self._logger.error(
                "Checkout session creation failed",
                extra={"booking_id": booking_ref, "status": result.status_code, "reason": result.reason},
            )
            raise SessionCreationError(result.reason)

        data = result.data or {}
        session_id = data.get("sessionId") or data.get("session_id")
        if not session_id:
            self._fail(ref)
            self._logger.error("Checkout response missing session id", extra={"booking_id": booking_ref})
            raise SessionCreationError("Payment provider returned no session id")

        ref.external_session_id = str(session_id)
        ref.checkout_url = data.get("url")
        self._logger.info(
            "Checkout session created",
            extra={"booking_id": booking_ref, "session_id": ref.external_session_id},
        )
        return ref

    def redirect(self, session_id: str) -> CheckoutRedirect:
        """Hand control to the hosted checkout page. Nothing local runs until a return URL is hit."""
        ref = self._find(session_id)
        ref.status = PaymentIntentStatus.redirected
        url = ref.checkout_url or f"{self._checkout_base_url}/{session_id}"
        return CheckoutRedirect(session_id=session_id, url=url)

    def verify(self, session_id: str) -> bool:
        """Ask the provider whether the session was paid. A return URL alone proves nothing."""
        ref = self._find(session_id)
        result = self._gateway.get_payment_status(session_id)
        if not result.ok:
            self._logger.error(
                "Checkout session status unavailable",
                extra={"booking_id": ref.booking_ref, "session_id": session_id, "reason": result.reason},
            )
            raise PaymentVerificationError(result.reason)

        status = _session_status(result.data)
        self._logger.info(
            "Checkout session status",
            extra={"booking_id": ref.booking_ref, "session_id": session_id, "status": status},
        )
        return status in PAID_STATUSES

    def complete(self, session_id: str) -> PaymentIntentRef:
        ref = self._find(session_id)
        ref.status = PaymentIntentStatus.confirmed
        self._active.pop(ref.booking_ref, None)
        self._logger.info("Checkout completed", extra={"booking_id": ref.booking_ref, "session_id": session_id})
        return ref

    def cancel(self, session_id: str) -> PaymentIntentRef:
        ref = self._find(session_id)
        self._fail(ref)
        self._logger.info("Checkout cancelled", extra={"booking_id": ref.booking_ref, "session_id": session_id})
        return ref

    def _find(self, session_id: str) -> PaymentIntentRef:
        for ref in self._active.values():
            if ref.external_session_id == session_id and ref.is_open:
                return ref
        raise StaleSessionError(f"No open checkout session {session_id!r}")

    def _fail(self, ref: PaymentIntentRef) -> None:
        ref.status = PaymentIntentStatus.failed
        if self._active.get(ref.booking_ref) is ref:
            del self._active[ref.booking_ref]
