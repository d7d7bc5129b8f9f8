from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class KeyStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    WITH_EMPLOYEE = "WITH_EMPLOYEE"
    WITH_HRGA = "WITH_HRGA"
    LOST = "LOST"


@dataclass(slots=True)
class LockerKey:
    """
    A physical key of a locker. Spare/duplicate keys have no engraved `physical_key_number`.

    `holder_id` is only meaningful while the key is WITH_EMPLOYEE; it is tolerated (not cleared) otherwise.
    """
    locker_id: str
    key_number: int
    physical_key_number: str | None = None
    label: str | None = None
    status: KeyStatus = KeyStatus.AVAILABLE
    holder_id: str | None = None
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def check_holder(self) -> None:
        if self.status is KeyStatus.WITH_EMPLOYEE and not self.holder_id:
            raise ValueError("A key WITH_EMPLOYEE must have a holder")
