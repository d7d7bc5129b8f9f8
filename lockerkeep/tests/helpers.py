from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Any

from starlette.testclient import TestClient

TODAY = date(2024, 6, 1)


class FixedClock:
    """
    Frozen calendar day; `now()` still moves forward one second per call so log entries keep their order.
    """

    def __init__(self, today: date) -> None:
        self.current = today
        self._ticks = 0

    def today(self) -> date:
        return self.current

    def now(self) -> datetime:
        self._ticks += 1
        return datetime.combine(self.current, time(8, 0)) + timedelta(seconds=self._ticks)


def create_employee(
        client: TestClient, nik: str, name: str = "Budi", department: str = "Production"
) -> dict[str, Any]:
    res = client.post("/employees", json={"nik": nik, "name": name, "department": department})
    assert res.status_code == 201, res.text
    return res.json()


def assign(client: TestClient, locker_id: str, employee_id: str, start: str, end: str | None = None, **extra: Any):
    body = {"locker_id": locker_id, "employee_id": employee_id, "start_date": start, "end_date": end, **extra}
    return client.post("/contracts", json=body)


def locker_detail(client: TestClient, locker_id: str) -> dict[str, Any]:
    res = client.get(f"/lockers/{locker_id}")
    assert res.status_code == 200, res.text
    return res.json()


def locker_status(client: TestClient, locker_id: str) -> str:
    return locker_detail(client, locker_id)["locker"]["status"]


def active_contracts(client: TestClient, locker_id: str) -> list[dict[str, Any]]:
    return [c for c in locker_detail(client, locker_id)["contracts"] if c["is_active"]]
