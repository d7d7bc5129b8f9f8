from __future__ import annotations

from datetime import date, datetime
from typing import Protocol


class Clock(Protocol):
    """
    Source of "current date/time" for overdue computation and log timestamps.
    """

    def today(self) -> date:
        raise NotImplementedError

    def now(self) -> datetime:
        raise NotImplementedError
