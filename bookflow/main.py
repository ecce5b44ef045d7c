import logging

from fastapi import FastAPI

from bookflow.api.payments import router as payments_router
from bookflow.api.v1.admin import router as admin_router
from bookflow.api.v1.wizards import router as wizards_router
from bookflow.core.config import settings

CONTEXT_KEYS = ("wizard_id", "booking_id", "step", "session_id", "method", "status", "reason")


class ContextFormatter(logging.Formatter):
    """Appends the booking context passed through ``extra=`` as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        pairs = [
            f"{key}={getattr(record, key)}"
            for key in CONTEXT_KEYS
            if getattr(record, key, None) not in (None, "")
        ]
        return f"{line} | {' '.join(pairs)}" if pairs else line


def configure_logging(level: str) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter("%(asctime)s %(levelname)s:%(name)s:%(message)s"))

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)


configure_logging(settings.LOG_LEVEL)
logging.getLogger(__name__).info(
    "Starting booking service",
    extra={"status": settings.ENV, "reason": settings.BOOKING_API_BASE_URL or "in-memory gateways"},
)

app = FastAPI(title="Booking Checkout Orchestrator", version="1.0.0")

app.include_router(wizards_router, prefix="/api/v1/wizards", tags=["wizards"])
app.include_router(admin_router, prefix="/api/v1/admin", tags=["admin"])
app.include_router(payments_router, tags=["payments"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "env": settings.ENV}
