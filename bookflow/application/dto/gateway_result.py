from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Success:
    data: Any = None
    status_code: int | None = None

    ok = True


@dataclass(frozen=True)
class Failure:
    reason: str
    status_code: int | None = None

    ok = False


GatewayResult = Union[Success, Failure]
