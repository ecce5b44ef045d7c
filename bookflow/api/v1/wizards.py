from datetime import date

from fastapi import APIRouter, Depends, Query

from bookflow.api.v1.common import flow_errors, flow_state, get_flow
from bookflow.api.v1.schemas import (
    AddonSchema,
    AvailabilitySchema,
    ContactInfoSchema,
    DateTimeSchema,
    PaymentMethodSchema,
    ServiceSchema,
    ServiceSelectionSchema,
    SlotSchema,
    WizardCreateSchema,
    WizardStateSchema,
)
from bookflow.application.ports.wizard_store import WizardStorePort
from bookflow.wiring.dependencies import get_wizard_factory, get_wizard_store

router = APIRouter()


@router.post("", response_model=WizardStateSchema, status_code=201)
def open_wizard(
    req: WizardCreateSchema | None = None,
    factory=Depends(get_wizard_factory),
    store: WizardStorePort = Depends(get_wizard_store),
):
    wizard = factory(client_ref=req.client_ref if req else None)
    with flow_errors():
        wizard.open()
    store.put(wizard.activation_id, wizard)
    return flow_state(wizard)


@router.get("/{wizard_id}", response_model=WizardStateSchema)
def get_wizard(wizard_id: str, store: WizardStorePort = Depends(get_wizard_store)):
    return flow_state(get_flow(store, wizard_id))


@router.get("/{wizard_id}/services")
def list_services(wizard_id: str, store: WizardStorePort = Depends(get_wizard_store)):
    wizard = get_flow(store, wizard_id)
    table = getattr(wizard, "price_table", None)
    if table is None:
        return {"services": [], "addons": []}
    return {
        "services": [
            ServiceSchema(
                service_key=s.service_key,
                name=s.name,
                duration_minutes=s.duration_minutes,
                price=s.price,
            )
            for s in table.services
        ],
        "addons": [
            AddonSchema(addon_id=a.addon_id, name=a.name, price=a.price, available_for=list(a.available_for))
            for a in table.addons
        ],
    }


@router.post("/{wizard_id}/service", response_model=WizardStateSchema)
def select_service(
    wizard_id: str,
    req: ServiceSelectionSchema,
    store: WizardStorePort = Depends(get_wizard_store),
):
    wizard = get_flow(store, wizard_id)
    with flow_errors():
        wizard.select_service(req.service_type, req.addons)
    return flow_state(wizard)


@router.get("/{wizard_id}/availability", response_model=AvailabilitySchema)
def availability(
    wizard_id: str,
    day: date = Query(..., alias="date"),
    store: WizardStorePort = Depends(get_wizard_store),
):
    wizard = get_flow(store, wizard_id)
    with flow_errors():
        slots = wizard.load_availability(day)
    return AvailabilitySchema(date=day, slots=[SlotSchema(time=s.time, available=s.is_available) for s in slots])


@router.post("/{wizard_id}/datetime", response_model=WizardStateSchema)
def select_date_time(
    wizard_id: str,
    req: DateTimeSchema,
    store: WizardStorePort = Depends(get_wizard_store),
):
    wizard = get_flow(store, wizard_id)
    with flow_errors():
        wizard.select_date_time(req.scheduled_date, req.scheduled_time)
    return flow_state(wizard)


@router.post("/{wizard_id}/contact", response_model=WizardStateSchema)
def submit_contact(
    wizard_id: str,
    req: ContactInfoSchema,
    store: WizardStorePort = Depends(get_wizard_store),
):
    wizard = get_flow(store, wizard_id)
    with flow_errors():
        wizard.submit_contact_info(req.client_name, req.client_email, req.client_phone, req.special_requests)
    return flow_state(wizard)


@router.post("/{wizard_id}/payment-method", response_model=WizardStateSchema)
def select_payment_method(
    wizard_id: str,
    req: PaymentMethodSchema,
    store: WizardStorePort = Depends(get_wizard_store),
):
    wizard = get_flow(store, wizard_id)
    with flow_errors():
        wizard.select_payment_method(req.payment_method, req.tip_amount)
    return flow_state(wizard)


@router.post("/{wizard_id}/back", response_model=WizardStateSchema)
def back(wizard_id: str, store: WizardStorePort = Depends(get_wizard_store)):
    wizard = get_flow(store, wizard_id)
    with flow_errors():
        wizard.back()
    return flow_state(wizard)


@router.post("/{wizard_id}/confirm", response_model=WizardStateSchema)
def confirm(wizard_id: str, store: WizardStorePort = Depends(get_wizard_store)):
    wizard = get_flow(store, wizard_id)
    with flow_errors():
        outcome = wizard.confirm()
    return flow_state(wizard, outcome)


@router.post("/{wizard_id}/retry", response_model=WizardStateSchema)
def retry(wizard_id: str, store: WizardStorePort = Depends(get_wizard_store)):
    wizard = get_flow(store, wizard_id)
    with flow_errors():
        outcome = wizard.retry()
    return flow_state(wizard, outcome)


@router.delete("/{wizard_id}", status_code=204)
def close_wizard(wizard_id: str, store: WizardStorePort = Depends(get_wizard_store)):
    wizard = get_flow(store, wizard_id)
    with flow_errors():
        wizard.close()
    store.remove(wizard_id)
