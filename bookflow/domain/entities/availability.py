from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class AvailabilitySlot:
    date: date
    time: str  # HH:MM, 24h
    is_available: bool = True
