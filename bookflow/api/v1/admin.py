import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from bookflow.api.v1.common import flow_errors, flow_state, get_flow
from bookflow.api.v1.schemas import (
    BatchDeleteRequestSchema,
    BatchDeleteResponseSchema,
    DeleteOutcomeSchema,
    PaymentMethodSchema,
    WizardStateSchema,
)
from bookflow.application.ports.wizard_store import WizardStorePort
from bookflow.application.use_cases.batch_delete import BatchDeleteBookingsUseCase
from bookflow.core.config import settings
from bookflow.infrastructure.admin_access import verify_admin_access
from bookflow.wiring.dependencies import (
    get_batch_delete_use_case,
    get_editor_factory,
    get_wizard_factory,
    get_wizard_store,
)

logger = logging.getLogger(__name__)


def require_admin(request: Request) -> None:
    header_value = request.headers.get(settings.ADMIN_ACCESS_HEADER)
    status = verify_admin_access(header_value, settings.ADMIN_ACCESS_TOKEN, settings.ENV)
    if status is not None:
        logger.warning("Admin access refused", extra={"status": status})
        raise HTTPException(status_code=status, detail="Admin access required")


router = APIRouter(dependencies=[Depends(require_admin)])


@router.post("/wizards", response_model=WizardStateSchema, status_code=201)
def open_admin_wizard(
    factory=Depends(get_wizard_factory),
    store: WizardStorePort = Depends(get_wizard_store),
):
    """Booking wizard that creates through the admin endpoint; steps live under /api/v1/wizards."""
    wizard = factory(admin=True)
    with flow_errors():
        wizard.open()
    store.put(wizard.activation_id, wizard)
    return flow_state(wizard)


@router.post("/bookings/{booking_id}/editor", response_model=WizardStateSchema, status_code=201)
def open_editor(
    booking_id: str,
    factory=Depends(get_editor_factory),
    store: WizardStorePort = Depends(get_wizard_store),
):
    editor = factory(booking_id)
    with flow_errors():
        editor.open(booking_id)
    store.put(editor.activation_id, editor)
    return flow_state(editor)


@router.post("/editors/{editor_id}/payment-method", response_model=WizardStateSchema)
def editor_payment_method(
    editor_id: str,
    req: PaymentMethodSchema,
    store: WizardStorePort = Depends(get_wizard_store),
):
    editor = get_flow(store, editor_id)
    with flow_errors():
        editor.select_payment_method(req.payment_method, req.tip_amount)
    return flow_state(editor)


@router.post("/editors/{editor_id}/back", response_model=WizardStateSchema)
def editor_back(editor_id: str, store: WizardStorePort = Depends(get_wizard_store)):
    editor = get_flow(store, editor_id)
    with flow_errors():
        editor.back()
    return flow_state(editor)


@router.post("/editors/{editor_id}/confirm", response_model=WizardStateSchema)
def editor_confirm(editor_id: str, store: WizardStorePort = Depends(get_wizard_store)):
    editor = get_flow(store, editor_id)
    with flow_errors():
        outcome = editor.confirm()
    return flow_state(editor, outcome)


@router.post("/editors/{editor_id}/retry", response_model=WizardStateSchema)
def editor_retry(editor_id: str, store: WizardStorePort = Depends(get_wizard_store)):
    editor = get_flow(store, editor_id)
    with flow_errors():
        outcome = editor.retry()
    return flow_state(editor, outcome)


@router.delete("/editors/{editor_id}", status_code=204)
def close_editor(editor_id: str, store: WizardStorePort = Depends(get_wizard_store)):
    editor = get_flow(store, editor_id)
    with flow_errors():
        editor.close()
    store.remove(editor_id)


@router.post("/bookings/batch-delete", response_model=BatchDeleteResponseSchema)
def batch_delete(
    req: BatchDeleteRequestSchema,
    uc: BatchDeleteBookingsUseCase = Depends(get_batch_delete_use_case),
):
    report = uc.execute(req.booking_ids)
    return BatchDeleteResponseSchema(
        deleted=len(report.deleted),
        failed=len(report.failed),
        results=[
            DeleteOutcomeSchema(booking_id=o.booking_id, deleted=o.deleted, reason=o.reason)
            for o in report.outcomes
        ],
    )
