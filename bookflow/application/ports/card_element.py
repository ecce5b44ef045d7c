from __future__ import annotations

from abc import ABC, abstractmethod


class CardElementPort(ABC):
    """A single mount point for the card-input element."""

    @abstractmethod
    def mount(self, owner: str) -> str:
        """Mount a new element for ``owner``. Returns the element id.
        Raises IntegrationError if an element is already live."""
        raise NotImplementedError

    @abstractmethod
    def destroy(self, element_id: str) -> bool:
        """Destroy the element if it is the live one. Returns True if destroyed."""
        raise NotImplementedError

    @abstractmethod
    def teardown(self) -> None:
        """Destroy whatever element is live on this mount point."""
        raise NotImplementedError

    @abstractmethod
    def live_element(self) -> str | None:
        raise NotImplementedError
