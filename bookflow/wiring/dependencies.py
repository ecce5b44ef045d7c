from functools import lru_cache, partial
import logging
import uuid
from zoneinfo import ZoneInfo

from bookflow.core.config import settings
from bookflow.application.use_cases.admin_editor import AdminBookingEditor
from bookflow.application.use_cases.batch_delete import BatchDeleteBookingsUseCase
from bookflow.application.use_cases.booking_wizard import BookingWizard
from bookflow.application.use_cases.checkout_session import CheckoutSessionOrchestrator
from bookflow.infrastructure.booking_api.client import BookingApiClient
from bookflow.infrastructure.booking_api.memory_gateway import InMemoryBookingGateway
from bookflow.infrastructure.payments.card_element import MountPointRegistry
from bookflow.infrastructure.payments.checkout_client import CheckoutSessionClient
from bookflow.infrastructure.payments.mock_payments import MockPaymentGateway
from bookflow.infrastructure.store.memory_store import MemoryWizardStore
from bookflow.application.ports.booking_gateway import BookingGatewayPort
from bookflow.application.ports.payment_gateway import PaymentGatewayPort


logger = logging.getLogger(__name__)


def _use_mocks() -> bool:
    return not settings.BOOKING_API_BASE_URL or settings.ENV.lower() in {"dev", "local"}


@lru_cache
def get_booking_gateway() -> BookingApiClient | InMemoryBookingGateway:
    if _use_mocks():
        logger.info("Using InMemoryBookingGateway (ENV=%s)", settings.ENV)
        return InMemoryBookingGateway()
    return BookingApiClient()


@lru_cache
def get_payment_gateway() -> PaymentGatewayPort:
    if _use_mocks():
        logger.info("Using MockPaymentGateway (ENV=%s)", settings.ENV)
        return MockPaymentGateway()
    return CheckoutSessionClient()


@lru_cache
def get_wizard_store() -> MemoryWizardStore:
    return MemoryWizardStore(ttl_seconds=settings.WIZARD_TTL_SECONDS)


@lru_cache
def get_mount_registry() -> MountPointRegistry:
    return MountPointRegistry()


def _return_urls(base_url: str, activation_id: str) -> tuple[str, str]:
    base = base_url.rstrip("/")
    query = f"wizard_id={activation_id}&session_id={{CHECKOUT_SESSION_ID}}"
    return f"{base}/payments/success?{query}", f"{base}/payments/cancel?{query}"


def build_booking_wizard(client_ref: str | None = None, admin: bool = False) -> BookingWizard:
    activation_id = uuid.uuid4().hex
    gateway = get_booking_gateway()
    registry = get_mount_registry()
    mount_key = f"public:{client_ref or activation_id}"
    success_url, cancel_url = _return_urls(settings.PUBLIC_BASE_URL, activation_id)
    checkout = CheckoutSessionOrchestrator(
        gateway=get_payment_gateway(),
        success_url=success_url,
        cancel_url=cancel_url,
        checkout_base_url=settings.CHECKOUT_REDIRECT_BASE_URL,
        admin_initiated=admin,
    )
    return BookingWizard(
        pricing=gateway,
        availability=gateway,
        bookings=gateway,
        checkout=checkout,
        card_element=registry.get(mount_key),
        timezone=ZoneInfo(settings.BUSINESS_TIMEZONE),
        practitioner_name=settings.DEFAULT_PRACTITIONER_NAME,
        booking_window_days=settings.BOOKING_WINDOW_DAYS,
        admin=admin,
        activation_id=activation_id,
        on_release=partial(registry.discard, mount_key),
    )


def build_admin_editor(booking_id: str) -> AdminBookingEditor:
    activation_id = uuid.uuid4().hex
    success_url, cancel_url = _return_urls(settings.ADMIN_RETURN_BASE_URL or settings.PUBLIC_BASE_URL, activation_id)
    checkout = CheckoutSessionOrchestrator(
        gateway=get_payment_gateway(),
        success_url=success_url,
        cancel_url=cancel_url,
        checkout_base_url=settings.CHECKOUT_REDIRECT_BASE_URL,
        admin_initiated=True,
    )
    # Reopening the modal for the same booking lands on the same mount point
    registry = get_mount_registry()
    mount_key = f"admin:{booking_id}"
    return AdminBookingEditor(
        bookings=get_booking_gateway(),
        checkout=checkout,
        card_element=registry.get(mount_key),
        practitioner_name=settings.DEFAULT_PRACTITIONER_NAME,
        activation_id=activation_id,
        on_release=partial(registry.discard, mount_key),
    )


def get_batch_delete_use_case() -> BatchDeleteBookingsUseCase:
    bookings: BookingGatewayPort = get_booking_gateway()
    return BatchDeleteBookingsUseCase(bookings=bookings)


def get_wizard_factory():
    return build_booking_wizard


def get_editor_factory():
    return build_admin_editor
