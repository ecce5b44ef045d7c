from __future__ import annotations

import logging
import uuid
from typing import Any

from bookflow.application.dto.gateway_result import Failure, GatewayResult, Success
from bookflow.application.ports.payment_gateway import PaymentGatewayPort


class MockPaymentGateway(PaymentGatewayPort):
    """Checkout stand-in for dev/local runs. Sessions report "paid" unless a test changes them."""

    def __init__(self) -> None:
        self.sessions: dict[str, dict[str, Any]] = {}
        self._logger = logging.getLogger(__name__)

    def create_checkout_session(
        self,
        amount: float,
        description: str,
        metadata: dict[str, str],
        success_url: str,
        cancel_url: str,
        admin: bool = False,
    ) -> GatewayResult:
        session_id = f"cs_test_{uuid.uuid4().hex[:16]}"
        self.sessions[session_id] = {
            "amount": amount,
            "description": description,
            "metadata": dict(metadata),
            "success_url": success_url.replace("{CHECKOUT_SESSION_ID}", session_id),
            "cancel_url": cancel_url.replace("{CHECKOUT_SESSION_ID}", session_id),
            "payment_status": "paid",
        }
        self._logger.info("Mock checkout session created", extra={"session_id": session_id})
        return Success(data={"sessionId": session_id})

    def get_payment_status(self, session_id: str) -> GatewayResult:
        session = self.sessions.get(session_id)
        if session is None:
            return Failure(reason="HTTP 404: Session not found", status_code=404)
        return Success(data={"success": True, "data": {"payment_status": session["payment_status"]}})
