from __future__ import annotations

import logging
from datetime import date
from typing import Any

from bookflow.application.utils.time_format import normalize_time
from bookflow.domain.entities.availability import AvailabilitySlot

logger = logging.getLogger(__name__)


def normalize_slots(day: date, raw_slots: list[Any] | None) -> list[AvailabilitySlot]:
    """
    The availability endpoint returns slots either as bare strings ("14:00", "2:00 PM")
    or as {"time": ..., "available": bool} objects. Both become AvailabilitySlot here;
    unparseable entries are dropped. Duplicate times keep the first entry.
    """
    slots: list[AvailabilitySlot] = []
    seen: set[str] = set()
    for raw in raw_slots or []:
        if isinstance(raw, str):
            time_text, available = raw, True
        elif isinstance(raw, dict):
            time_text = raw.get("time") or raw.get("start_time") or raw.get("display_time") or ""
            available = bool(raw.get("available", raw.get("isAvailable", True)))
        else:
            logger.warning("Skipping slot with unexpected shape", extra={"reason": type(raw).__name__})
            continue

        normalized = normalize_time(str(time_text))
        if normalized is None:
            logger.warning("Skipping unparseable slot time", extra={"reason": str(time_text)})
            continue
        if normalized in seen:
            continue
        seen.add(normalized)
        slots.append(AvailabilitySlot(date=day, time=normalized, is_available=available))

    return sorted(slots, key=lambda s: s.time)
