from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class KeyAction(str, Enum):
    TAKEN = "TAKEN"
    RETURNED = "RETURNED"


class KeyMethod(str, Enum):
    QR = "QR"
    MANUAL = "MANUAL"


@dataclass(frozen=True, slots=True)
class KeyLog:
    """Append-only audit record of a key hand-off."""
    locker_id: str
    employee_id: str
    action: KeyAction
    method: KeyMethod
    timestamp: datetime
    locker_key_id: str | None = None
    id: str | None = None
