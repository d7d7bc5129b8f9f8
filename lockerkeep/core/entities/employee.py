from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class Employee:
    nik: str
    name: str
    department: str
    is_active: bool = True
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
