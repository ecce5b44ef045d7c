from __future__ import annotations


class ValidationError(ValueError):
    """Raised when a step's input is missing or invalid. Carries one message per field."""

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()))


class InvalidAmountError(ValueError):
    """Raised when a payment is requested for a zero, negative or missing amount."""
    pass


class SessionCreationError(RuntimeError):
    """Raised when the payment gateway does not return a usable checkout session."""
    pass


class PaymentCancelled(RuntimeError):
    """The client abandoned the external checkout page."""
    pass


class IntegrationError(RuntimeError):
    """Raised when a second card element is mounted on a live mount point."""
    pass


class WizardStateError(RuntimeError):
    """Raised when a transition is requested from the wrong step."""
    pass


class DuplicateSubmissionError(WizardStateError):
    """Raised when confirm is triggered while a submission is already in flight."""
    pass


class StaleSessionError(RuntimeError):
    """Raised when a payment return refers to a session that is not the active one."""
    pass


class CatalogUnavailableError(RuntimeError):
    """Raised when the service catalog cannot be loaded."""
    pass


class AvailabilityUnavailableError(RuntimeError):
    """Raised when open slots for a date cannot be fetched."""
    pass


class BookingLookupError(RuntimeError):
    """Raised when an existing booking cannot be loaded for editing."""
    pass


class PaymentVerificationError(RuntimeError):
    """Raised when the payment status of a returned checkout session cannot be confirmed."""
    pass
