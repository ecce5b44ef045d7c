from __future__ import annotations

import logging

import httpx

from bookflow.application.dto.gateway_result import Failure, GatewayResult, Success
from bookflow.application.ports.payment_gateway import PaymentGatewayPort
from bookflow.core.config import settings


class CheckoutSessionClient(PaymentGatewayPort):
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
            raise ValueError("BOOKING_API_BASE_URL is required for checkout sessions")

    def create_checkout_session(
        self,
        amount: float,
        description: str,
        metadata: dict[str, str],
        success_url: str,
        cancel_url: str,
        admin: bool = False,
    ) -> GatewayResult:
        url = f"{self._base_url}/payments/create-checkout-session"
        headers = {"Content-Type": "application/json"}
        if admin and self._admin_token:
            headers[self._admin_header] = self._admin_token
        payload = {
            "amount": amount,
            "description": description,
            "metadata": metadata,
            "success_url": success_url,
            "cancel_url": cancel_url,
        }

        try:
            resp = self._client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            self._logger.error("Checkout session request failed", extra={"reason": str(e)})
            return Failure(reason=f"Payment service unreachable: {e}")

        if resp.status_code >= 400:
            self._logger.error(
                "Checkout session rejected",
                extra={"status": resp.status_code, "reason": resp.text[:200]},
            )
            return Failure(reason=f"HTTP {resp.status_code}", status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError:
            return Failure(reason="Payment service returned invalid JSON", status_code=resp.status_code)
        if not isinstance(data, dict):
            return Failure(reason="Payment service returned an unexpected body", status_code=resp.status_code)
        return Success(data=data, status_code=resp.status_code)

    def get_payment_status(self, session_id: str) -> GatewayResult:
        url = f"{self._base_url}/web-booking/payment-status/{session_id}"
        try:
            resp = self._client.get(url, headers={"Content-Type": "application/json"})
        except httpx.HTTPError as e:
            self._logger.error("Payment status request failed", extra={"session_id": session_id, "reason": str(e)})
            return Failure(reason=f"Payment service unreachable: {e}")

        if resp.status_code >= 400:
            self._logger.error(
                "Payment status rejected",
                extra={"session_id": session_id, "status": resp.status_code, "reason": resp.text[:200]},
            )
            return Failure(reason=f"HTTP {resp.status_code}", status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError:
            return Failure(reason="Payment service returned invalid JSON", status_code=resp.status_code)
        if not isinstance(data, dict) or data.get("success") is False:
            return Failure(reason="Payment status unavailable", status_code=resp.status_code)
        return Success(data=data, status_code=resp.status_code)
