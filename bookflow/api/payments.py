from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from bookflow.api.v1.common import flow_errors, flow_state, get_flow
from bookflow.api.v1.schemas import WizardStateSchema
from bookflow.application.ports.wizard_store import WizardStorePort
from bookflow.wiring.dependencies import get_wizard_store

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/payments/success", response_model=WizardStateSchema)
def payment_success(
    wizard_id: str = Query(...),
    session_id: str = Query(...),
    store: WizardStorePort = Depends(get_wizard_store),
):
    flow = get_flow(store, wizard_id)
    logger.info("Checkout success return", extra={"wizard_id": wizard_id, "session_id": session_id})
    with flow_errors():
        outcome = flow.handle_payment_return(session_id, succeeded=True)
    return flow_state(flow, outcome)


@router.get("/payments/cancel", response_model=WizardStateSchema)
def payment_cancel(
    wizard_id: str = Query(...),
    session_id: str = Query(...),
    store: WizardStorePort = Depends(get_wizard_store),
):
    flow = get_flow(store, wizard_id)
    logger.info("Checkout cancel return", extra={"wizard_id": wizard_id, "session_id": session_id})
    with flow_errors():
        outcome = flow.handle_payment_return(session_id, succeeded=False)
    return flow_state(flow, outcome)
