from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class ServiceCatalogEntry:
    service_key: str  # "60min", "90min", "consultation", ...
    name: str
    duration_minutes: int
    price: Decimal
    description: str | None = None


@dataclass(frozen=True)
class Addon:
    addon_id: str
    name: str
    price: Decimal
    duration_adjustment: int = 0
    available_for: tuple[str, ...] = field(default_factory=tuple)  # empty means any service

    def is_available_for(self, service_key: str) -> bool:
        return not self.available_for or service_key in self.available_for
