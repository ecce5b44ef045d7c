from __future__ import annotations

from abc import ABC, abstractmethod

from bookflow.application.dto.gateway_result import GatewayResult


class PaymentGatewayPort(ABC):
    @abstractmethod
    def create_checkout_session(
        self,
        amount: float,
        description: str,
        metadata: dict[str, str],
        success_url: str,
        cancel_url: str,
        admin: bool = False,
    ) -> GatewayResult:
        """Create a hosted checkout session. Success data is the raw response dict."""
        raise NotImplementedError

    @abstractmethod
    def get_payment_status(self, session_id: str) -> GatewayResult:
        """Look up a checkout session's payment status. Success data is the raw response dict."""
        raise NotImplementedError
