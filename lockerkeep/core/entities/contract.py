from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(slots=True)
class Contract:
    employee_id: str
    locker_id: str
    contract_seq: int
    start_date: date
    end_date: date | None = None
    is_active: bool = True
    id: str | None = None
    created_at: datetime | None = None

    @property
    def is_permanent(self) -> bool:
        return self.end_date is None
