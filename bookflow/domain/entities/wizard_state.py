from __future__ import annotations

from enum import Enum


class WizardStep(str, Enum):
    service_selection = "service_selection"
    date_time_selection = "date_time_selection"
    contact_info = "contact_info"
    payment_method = "payment_method"
    summary = "summary"
    submitting = "submitting"
    confirmed = "confirmed"
    failed = "failed"
    closed = "closed"


# Steps the user can move back through with back().
EDITABLE_STEPS: tuple[WizardStep, ...] = (
    WizardStep.service_selection,
    WizardStep.date_time_selection,
    WizardStep.contact_info,
    WizardStep.payment_method,
    WizardStep.summary,
)

TERMINAL_STEPS = frozenset({WizardStep.confirmed, WizardStep.closed})
