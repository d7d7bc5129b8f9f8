from __future__ import annotations

from datetime import date, datetime, timezone


def _utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SystemClock:
    """
    Wall-clock implementation of `lockerkeep.core.clock.Clock`.

    Both the calendar day and log timestamps are UTC, so overdue checks and the key log agree around midnight.
    """

    def today(self) -> date:
        return _utc_now().date()

    def now(self) -> datetime:
        return _utc_now()
