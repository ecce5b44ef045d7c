from __future__ import annotations

import logging
import threading
import uuid

from bookflow.application.exceptions import IntegrationError
from bookflow.application.ports.card_element import CardElementPort


class CardElementMountPoint(CardElementPort):
    """
    Tracks the card-input element living on one mount point.
    Like the payment SDK it stands in for, a second mount without destroying
    the first raises IntegrationError.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._live: str | None = None
        self._owner: str | None = None
        self._logger = logging.getLogger(__name__)

    def mount(self, owner: str) -> str:
        if self._live is not None:
            raise IntegrationError(
                f"Mount point {self.name!r} already holds element {self._live} (owner {self._owner})"
            )
        self._live = f"card_{uuid.uuid4().hex[:10]}"
        self._owner = owner
        self._logger.debug("Card element mounted", extra={"wizard_id": owner, "reason": self.name})
        return self._live

    def destroy(self, element_id: str) -> bool:
        if self._live != element_id:
            return False
        self._live = None
        self._owner = None
        return True

    def teardown(self) -> None:
        if self._live is not None:
            self._logger.info(
                "Tearing down stale card element",
                extra={"wizard_id": self._owner, "reason": self.name},
            )
        self._live = None
        self._owner = None

    def live_element(self) -> str | None:
        return self._live

    @property
    def owner(self) -> str | None:
        return self._owner


class MountPointRegistry:
    """One CardElementMountPoint per surface key, e.g. ``admin:<booking_id>``."""

    def __init__(self) -> None:
        self._points: dict[str, CardElementMountPoint] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> CardElementMountPoint:
        with self._lock:
            point = self._points.get(key)
            if point is None:
                point = CardElementMountPoint(key)
                self._points[key] = point
            return point

    def discard(self, key: str) -> bool:
        """Forget the mount point unless another activation still has an element on it."""
        with self._lock:
            point = self._points.get(key)
            if point is None or point.live_element() is not None:
                return False
            del self._points[key]
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._points)
