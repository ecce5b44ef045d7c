from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class WizardStorePort(ABC):
    @abstractmethod
    def put(self, activation_id: str, flow: Any) -> None:
        raise NotImplementedError

    @abstractmethod
    def get(self, activation_id: str) -> Any | None:
        raise NotImplementedError

    @abstractmethod
    def remove(self, activation_id: str) -> Any | None:
        raise NotImplementedError
