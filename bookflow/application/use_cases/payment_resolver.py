from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from bookflow.application.exceptions import InvalidAmountError, ValidationError
from bookflow.domain.entities.payment import PaymentMethod, PaymentStatus


@dataclass(frozen=True)
class PaymentResolution:
    method: PaymentMethod
    amount: Decimal
    requires_redirect: bool
    payment_status: PaymentStatus | None = None  # set for direct completion


def resolve(method: PaymentMethod | str | None, amount: Decimal | float | str | None) -> PaymentResolution:
    """
    Decide how a payment completes.
    cash -> direct booking call with payment_status "unpaid";
    card -> checkout session and external redirect.
    Runs before any network call, so a bad amount never reaches a gateway.
    """
    if amount is None or amount == "":
        raise InvalidAmountError("Payment amount is missing")
    try:
        value = Decimal(str(amount)).quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError):
        raise InvalidAmountError(f"Payment amount {amount!r} is not a number")
    if value.is_nan() or value <= 0:
        raise InvalidAmountError(f"Payment amount must be positive, got {value}")

    try:
        resolved = PaymentMethod(method)
    except ValueError:
        raise ValidationError({"payment_method": f"Unsupported payment method {method!r}."})

    if resolved is PaymentMethod.cash:
        return PaymentResolution(
            method=resolved,
            amount=value,
            requires_redirect=False,
            payment_status=PaymentStatus.unpaid,
        )
    return PaymentResolution(method=resolved, amount=value, requires_redirect=True)
