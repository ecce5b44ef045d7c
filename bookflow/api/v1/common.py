from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException

from bookflow.api.v1.schemas import DraftSchema, WizardStateSchema
from bookflow.application.exceptions import (
    AvailabilityUnavailableError,
    BookingLookupError,
    CatalogUnavailableError,
    IntegrationError,
    InvalidAmountError,
    PaymentVerificationError,
    StaleSessionError,
    ValidationError,
    WizardStateError,
)
from bookflow.application.ports.wizard_store import WizardStorePort
from bookflow.application.use_cases.confirmation_presenter import ConfirmationPresenter
from bookflow.application.use_cases.payment_flow import FlowOutcome, PaymentFlow
from bookflow.domain.entities.booking_draft import DraftLockedError

logger = logging.getLogger(__name__)


@contextmanager
def flow_errors() -> Iterator[None]:
    """Map flow exceptions to HTTP responses."""
    try:
        yield
    except ValidationError as e:
        raise HTTPException(status_code=422, detail={"errors": e.errors})
    except InvalidAmountError as e:
        raise HTTPException(status_code=422, detail={"errors": {"amount": str(e)}})
    except (WizardStateError, DraftLockedError, StaleSessionError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except BookingLookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (CatalogUnavailableError, AvailabilityUnavailableError, PaymentVerificationError) as e:
        raise HTTPException(status_code=502, detail=str(e))
    except IntegrationError as e:
        logger.exception("Card element mounted twice", extra={"reason": str(e)})
        raise HTTPException(status_code=500, detail="Payment form could not be initialised")


def get_flow(store: WizardStorePort, wizard_id: str) -> PaymentFlow:
    flow = store.get(wizard_id)
    if flow is None:
        raise HTTPException(status_code=404, detail="Unknown wizard")
    return flow


def flow_state(flow: PaymentFlow, outcome: FlowOutcome | None = None) -> WizardStateSchema:
    draft = flow.draft
    confirmation = None
    if flow.confirmation is not None:
        confirmation = ConfirmationPresenter().render(flow.confirmation).as_dict()
    return WizardStateSchema(
        wizard_id=flow.activation_id,
        step=flow.step.value,
        can_confirm=flow.can_confirm,
        draft=DraftSchema(
            service_type=draft.service_type,
            addons=list(draft.addons),
            scheduled_date=draft.scheduled_date,
            scheduled_time=draft.scheduled_time,
            client_name=draft.client_name,
            client_email=draft.client_email,
            client_phone=draft.client_phone,
            special_requests=draft.special_requests,
            payment_method=draft.payment_method.value if draft.payment_method else None,
            tip_amount=draft.tip_amount,
            total_price=draft.total_price,
            amount_due=draft.amount_due,
            booking_id=draft.booking_id,
            locked=draft.locked,
        ),
        failure_reason=flow.failure_reason,
        payment_captured=flow.payment_captured,
        redirect_url=outcome.redirect.url if outcome and outcome.redirect else None,
        confirmation=confirmation,
    )
