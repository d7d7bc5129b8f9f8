from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from lockerkeep.core.dates import is_overdue


class LockerStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    FILLED = "FILLED"
    OVERDUE = "OVERDUE"
    MAINTENANCE = "MAINTENANCE"
    UNIDENTIFIED = "UNIDENTIFIED"


OVERRIDE_STATUSES = frozenset({LockerStatus.MAINTENANCE, LockerStatus.UNIDENTIFIED})


def derive_status(*, has_active_contract: bool, end_date: date | None, today: date) -> LockerStatus:
    """
    Status implied by contract state alone. Permanent contracts (no end date) are never overdue.
    """
    if not has_active_contract:
        return LockerStatus.AVAILABLE
    if end_date is not None and is_overdue(end_date, today):
        return LockerStatus.OVERDUE
    return LockerStatus.FILLED


@dataclass(slots=True)
class Locker:
    locker_number: str
    room_id: str
    status: LockerStatus = LockerStatus.AVAILABLE
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_overridden(self) -> bool:
        """MAINTENANCE/UNIDENTIFIED are set by an operator, not derived from contracts."""
        return self.status in OVERRIDE_STATUSES

    def occupy(self, *, end_date: date | None, today: date) -> None:
        self.status = derive_status(has_active_contract=True, end_date=end_date, today=today)

    def release(self) -> None:
        self.status = LockerStatus.AVAILABLE

    def set_override(self, status: LockerStatus) -> None:
        if status not in OVERRIDE_STATUSES:
            raise ValueError(f"{status.value} is not an operator override status")
        self.status = status


def locker_number_for(room_id: str, seq: int) -> str:
    return f"L/{room_id}/{seq:03d}"


def physical_key_number_for(locker_number: str) -> str:
    """'L/M01/001' -> 'M01-001'"""
    _, room_id, seq = locker_number.split("/")
    return f"{room_id}-{seq}"


@dataclass(frozen=True, slots=True)
class RoomConfig:
    room_id: str
    name: str
    count: int
    columns: int = 10
