from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from bookflow.application.ports.booking_gateway import BookingGatewayPort


@dataclass(frozen=True)
class DeleteOutcome:
    booking_id: str
    deleted: bool
    reason: str | None = None


@dataclass(frozen=True)
class BatchDeleteReport:
    outcomes: list[DeleteOutcome] = field(default_factory=list)

    @property
    def deleted(self) -> list[str]:
        return [o.booking_id for o in self.outcomes if o.deleted]

    @property
    def failed(self) -> list[DeleteOutcome]:
        return [o for o in self.outcomes if not o.deleted]


class BatchDeleteBookingsUseCase:
    """Delete bookings one by one. A failed item is reported and the batch moves on."""

    def __init__(self, bookings: BookingGatewayPort) -> None:
        self._bookings = bookings
        self._logger = logging.getLogger(__name__)

    def execute(self, booking_ids: Iterable[str]) -> BatchDeleteReport:
        outcomes: list[DeleteOutcome] = []
        for raw_id in booking_ids:
            booking_id = (raw_id or "").strip()
            if not booking_id:
                outcomes.append(DeleteOutcome(booking_id=raw_id or "", deleted=False, reason="Empty booking id"))
                continue

            result = self._bookings.delete_booking(booking_id)
            if result.ok:
                outcomes.append(DeleteOutcome(booking_id=booking_id, deleted=True))
            else:
                self._logger.warning(
                    "Booking delete failed",
                    extra={"booking_id": booking_id, "status": result.status_code, "reason": result.reason},
                )
                outcomes.append(DeleteOutcome(booking_id=booking_id, deleted=False, reason=result.reason))

        report = BatchDeleteReport(outcomes=outcomes)
        self._logger.info(
            "Batch delete finished",
            extra={"reason": f"deleted={len(report.deleted)} failed={len(report.failed)}"},
        )
        return report
