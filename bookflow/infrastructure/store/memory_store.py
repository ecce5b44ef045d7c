from __future__ import annotations

import logging
import threading
import time
from typing import Any

from bookflow.application.ports.wizard_store import WizardStorePort


class MemoryWizardStore(WizardStorePort):
    """
    Live wizard/editor activations keyed by activation id.
    Activations untouched for ``ttl_seconds`` are disposed and dropped on the next put or get.
    """

    def __init__(self, ttl_seconds: float = 86400.0) -> None:
        self._flows: dict[str, Any] = {}
        self._touched: dict[str, float] = {}
        self._ttl_seconds = ttl_seconds
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def put(self, activation_id: str, flow: Any, now_ts: float | None = None) -> None:
        now_ts = time.monotonic() if now_ts is None else now_ts
        expired = self._evict_expired(now_ts)
        with self._lock:
            self._flows[activation_id] = flow
            self._touched[activation_id] = now_ts
        self._dispose(expired)

    def get(self, activation_id: str, now_ts: float | None = None) -> Any | None:
        now_ts = time.monotonic() if now_ts is None else now_ts
        expired = self._evict_expired(now_ts)
        with self._lock:
            flow = self._flows.get(activation_id)
            if flow is not None:
                self._touched[activation_id] = now_ts
        self._dispose(expired)
        return flow

    def remove(self, activation_id: str) -> Any | None:
        with self._lock:
            self._touched.pop(activation_id, None)
            return self._flows.pop(activation_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._flows)

    def _evict_expired(self, now_ts: float) -> list[tuple[str, Any]]:
        with self._lock:
            stale = [key for key, ts in self._touched.items() if now_ts - ts > self._ttl_seconds]
            expired = [(key, self._flows.pop(key)) for key in stale]
            for key in stale:
                del self._touched[key]
        return expired

    def _dispose(self, expired: list[tuple[str, Any]]) -> None:
        # Outside the store lock: dispose takes the activation's own lock
        for activation_id, flow in expired:
            self._logger.info("Evicting idle activation", extra={"wizard_id": activation_id})
            flow.dispose()
