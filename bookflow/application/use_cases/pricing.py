from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable

from bookflow.application.exceptions import CatalogUnavailableError, ValidationError
from bookflow.application.ports.booking_gateway import PricingGatewayPort
from bookflow.domain.entities.service_catalog import Addon, ServiceCatalogEntry

logger = logging.getLogger(__name__)


class PriceTable:
    """Synchronous price lookup over an already-fetched catalog."""

    def __init__(self, services: Iterable[ServiceCatalogEntry], addons: Iterable[Addon] = ()) -> None:
        self._services = {s.service_key: s for s in services}
        self._addons = {a.addon_id: a for a in addons}

    @classmethod
    def load(cls, gateway: PricingGatewayPort) -> "PriceTable":
        sessions = gateway.get_session_pricing()
        if not sessions.ok:
            logger.error("Service catalog unavailable", extra={"reason": sessions.reason})
            raise CatalogUnavailableError(sessions.reason)

        addons = gateway.get_addons()
        if not addons.ok:
            # Add-ons are optional; booking still works without them
            logger.warning("Add-on catalog unavailable", extra={"reason": addons.reason})
            return cls(sessions.data)
        return cls(sessions.data, addons.data)

    @property
    def services(self) -> list[ServiceCatalogEntry]:
        return list(self._services.values())

    @property
    def addons(self) -> list[Addon]:
        return list(self._addons.values())

    def get_service(self, service_key: str) -> ServiceCatalogEntry | None:
        return self._services.get((service_key or "").strip())

    def get_addon(self, addon_id: str) -> Addon | None:
        return self._addons.get(addon_id)

    def base_price(self, service_key: str, addon_ids: Iterable[str] = ()) -> Decimal:
        """Service price plus add-ons. Raises ValidationError for unknown keys."""
        entry = self.get_service(service_key)
        if entry is None:
            raise ValidationError({"service_type": f"Unknown service {service_key!r}."})

        total = entry.price
        for addon_id in addon_ids:
            addon = self.get_addon(addon_id)
            if addon is None:
                raise ValidationError({"addons": f"Unknown add-on {addon_id!r}."})
            if not addon.is_available_for(entry.service_key):
                raise ValidationError({"addons": f"{addon.name} is not available for {entry.name}."})
            total += addon.price
        return total.quantize(Decimal("0.01"))
