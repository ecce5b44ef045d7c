from __future__ import annotations

from dataclasses import dataclass

from bookflow.domain.entities.confirmation import BookingConfirmation


@dataclass(frozen=True)
class ConfirmationView:
    title: str
    rows: list[tuple[str, str]]

    def as_text(self) -> str:
        lines = [self.title]
        lines.extend(f"{label}: {value}" for label, value in self.rows)
        return "\n".join(lines)

    def as_dict(self) -> dict[str, object]:
        return {"title": self.title, "rows": [{"label": k, "value": v} for k, v in self.rows]}


class ConfirmationPresenter:
    """Renders a confirmation from data already in hand. Has no collaborators."""

    def render(self, confirmation: BookingConfirmation) -> ConfirmationView:
        rows = [
            ("Confirmation Number", confirmation.confirmation_number),
            ("Service", confirmation.service),
            ("Date", confirmation.datetime.strftime("%A, %B %d, %Y")),
            ("Time", confirmation.datetime.strftime("%I:%M %p").lstrip("0")),
            ("Practitioner", confirmation.practitioner),
        ]
        if confirmation.client_name:
            rows.append(("Client", confirmation.client_name))
        if confirmation.payment_method:
            rows.append(("Payment", confirmation.payment_method))
        rows.append(("Total", f"${confirmation.total_amount:.2f}"))
        return ConfirmationView(title="Booking Confirmed", rows=rows)
