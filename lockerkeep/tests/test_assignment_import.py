from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError
from starlette.testclient import TestClient

from lockerkeep.infrastructure.repositories.key_log_repository_impl import KeyLogRepositoryImpl
from lockerkeep.infrastructure.repositories.locker_repository_impl import LockerRepositoryImpl
from lockerkeep.tests.helpers import FixedClock, active_contracts, assign, create_employee, locker_detail, locker_status


def _row(locker_number: str, nik: str, start: str = "2024-01-01", end: str = "2025-01-01", notes: str = ""):
    return {"locker_number": locker_number, "employee_nik": nik, "start_date": start, "end_date": end, "notes": notes}


def test_import_fills_locker_and_hands_keys(client: TestClient, lockers: dict[str, str]) -> None:
    emp = create_employee(client, "EMP001")

    res = client.post("/import/contracts", json={"data": [_row("L/M01/001", "EMP001")]})
    assert res.status_code == 200, res.text
    assert res.json() == {"success": True, "imported": 1, "failed": 0, "errors": []}

    detail = locker_detail(client, lockers["L/M01/001"])
    assert detail["locker"]["status"] == "FILLED"
    assert detail["current_contract"]["employee_id"] == emp["id"]
    assert detail["current_contract"]["contract_seq"] == 1

    employee_key, backup = detail["keys"]
    assert employee_key["status"] == "WITH_EMPLOYEE"
    assert employee_key["holder_id"] == emp["id"]
    assert backup["status"] == "WITH_HRGA"
    assert backup["holder_id"] is None

    assert [(log["action"], log["method"], log["locker_key_id"]) for log in detail["recent_logs"]] == [
        ("TAKEN", "MANUAL", employee_key["id"])
    ]
    assert client.get("/qr-lookup", params={"nik": "EMP001"}).json()["has_key"] is True


def test_filled_locker_row_fails_and_later_rows_still_import(client: TestClient, lockers: dict[str, str]) -> None:
    first = create_employee(client, "EMP001")
    create_employee(client, "EMP002")
    create_employee(client, "EMP003")
    assign(client, lockers["L/M01/001"], first["id"], "2024-01-01", "2025-01-01")

    res = client.post(
        "/import/contracts",
        json={"data": [_row("L/M01/001", "EMP002"), _row("L/M01/002", "EMP003")]},
    )
    assert res.status_code == 207
    body = res.json()
    assert body["success"] is False
    assert body["imported"] == 1
    assert body["failed"] == 1
    assert body["errors"] == [
        {"row": 2, "locker_number": "L/M01/001", "employee_nik": "EMP002", "error": "Locker is FILLED, not AVAILABLE"}
    ]
    assert locker_status(client, lockers["L/M01/002"]) == "FILLED"
    assert active_contracts(client, lockers["L/M01/001"])[0]["employee_id"] == first["id"]


def test_permanent_row_is_never_overdue(client: TestClient, clock: FixedClock, lockers: dict[str, str]) -> None:
    create_employee(client, "EMP001")

    res = client.post("/import/contracts", json={"data": [_row("L/M01/001", "EMP001", start="1990-01-01", end="")]})
    assert res.json()["imported"] == 1

    contract = locker_detail(client, lockers["L/M01/001"])["current_contract"]
    assert contract["end_date"] is None

    clock.current = date(2150, 1, 1)
    assert client.get("/contracts/overdue").json() == []
    assert client.post("/lockers/sync-status").json()["changed"] == 0


def test_rows_are_numbered_from_two_and_validated_in_order(client: TestClient, lockers: dict[str, str]) -> None:
    create_employee(client, "EMP001")

    rows = [
        _row("", "EMP001"),
        _row("L/M01/001", "EMP001", start="01/02/2024"),
        _row("L/M01/001", "EMP001", start="2024-02-30"),
        _row("L/M01/001", "EMP001", start="2024-05-01", end="2024-04-01"),
        _row("L/M01/404", "EMP001"),
        _row("L/M01/001", "NOBODY"),
        _row("L/M01/001", "EMP001", end="2024-13-01"),
    ]
    res = client.post("/import/contracts", json={"data": rows})
    assert res.status_code == 207
    body = res.json()
    assert body["imported"] == 0
    assert [(e["row"], e["error"]) for e in body["errors"]] == [
        (2, "locker_number is required"),
        (3, "start_date must be in YYYY-MM-DD format"),
        (4, "start_date is not a valid date"),
        (5, "start_date must be before end_date"),
        (6, "Locker 'L/M01/404' not found"),
        (7, "Employee with NIK 'NOBODY' not found"),
        (8, "end_date is not a valid date"),
    ]
    assert body["errors"][0]["locker_number"] is None
    assert locker_status(client, lockers["L/M01/001"]) == "AVAILABLE"


def test_locker_under_maintenance_is_rejected(client: TestClient, lockers: dict[str, str]) -> None:
    create_employee(client, "EMP001")
    client.patch(f"/lockers/{lockers['L/M01/003']}", json={"status": "MAINTENANCE"})

    res = client.post("/import/contracts", json={"data": [_row("L/M01/003", "EMP001")]})
    assert res.json()["errors"][0]["error"] == "Locker is MAINTENANCE, not AVAILABLE"


def test_second_row_for_the_same_locker_sees_the_first(client: TestClient, lockers: dict[str, str]) -> None:
    create_employee(client, "EMP001")
    create_employee(client, "EMP002")

    res = client.post(
        "/import/contracts",
        json={"data": [_row("L/M01/001", "EMP001"), _row("L/M01/001", "EMP002")]},
    )
    body = res.json()
    assert body["imported"] == 1
    assert body["errors"][0]["row"] == 3
    assert body["errors"][0]["error"] == "Locker is FILLED, not AVAILABLE"
    assert len(active_contracts(client, lockers["L/M01/001"])) == 1


def test_backdated_row_is_imported_as_filled_until_synced(client: TestClient, lockers: dict[str, str]) -> None:
    create_employee(client, "EMP001")
    client.post("/import/contracts", json={"data": [_row("L/M01/002", "EMP001", start="2019-01-01", end="2020-01-01")]})

    assert locker_status(client, lockers["L/M01/002"]) == "FILLED"
    assert len(client.get("/contracts/overdue").json()) == 1

    assert client.post("/lockers/sync-status").json() == {"checked": 3, "changed": 1}
    assert locker_status(client, lockers["L/M01/002"]) == "OVERDUE"


def test_empty_batch_is_rejected(client: TestClient) -> None:
    res = client.post("/import/contracts", json={"data": []})
    assert res.status_code == 422
    assert res.json()["detail"] == "No data provided"


def test_csv_import_normalises_headers_and_skips_blank_lines(client: TestClient, lockers: dict[str, str]) -> None:
    create_employee(client, "EMP001")
    create_employee(client, "EMP002")
    content = (
        "\ufeffLocker_Number, Employee_NIK,Start_Date,End_Date,Notes\n"
        "L/M01/001,EMP001,2024-01-01,2025-01-01,first\n"
        "\n"
        "L/M01/002,EMP002,2024-01-01,,permanent\n"
    )

    res = client.post("/import/contracts/csv", files={"file": ("contracts.csv", content.encode("utf-8"), "text/csv")})
    assert res.status_code == 200, res.text
    assert res.json()["imported"] == 2
    assert locker_detail(client, lockers["L/M01/002"])["current_contract"]["end_date"] is None


def test_csv_import_requires_columns(client: TestClient) -> None:
    content = "locker_number,start_date\nL/M01/001,2024-01-01\n"
    res = client.post("/import/contracts/csv", files={"file": ("contracts.csv", content.encode("utf-8"), "text/csv")})
    assert res.status_code == 422
    assert res.json()["detail"] == "Missing required columns: employee_nik"


def test_csv_import_rejects_non_utf8_upload(client: TestClient, lockers: dict[str, str]) -> None:
    content = b"locker_number,employee_nik,start_date,end_date,notes\nL/M01/001,EMP\xff01,2024-01-01,,\n"
    res = client.post("/import/contracts/csv", files={"file": ("contracts.csv", content, "text/csv")})
    assert res.status_code == 422
    assert res.json()["detail"] == "CSV file must be UTF-8 encoded"
    assert locker_status(client, lockers["L/M01/001"]) == "AVAILABLE"


def _fail_first_call(monkeypatch: pytest.MonkeyPatch, cls: type, name: str, exc: Exception) -> None:
    original = getattr(cls, name)
    calls = {"n": 0}

    def _patched(self, *args, **kwargs):
        calls["n"] += 1
        if calls["n"] == 1:
            raise exc
        return original(self, *args, **kwargs)

    monkeypatch.setattr(cls, name, _patched)


def test_store_failure_leaves_no_trace_of_the_row(
        client: TestClient, lockers: dict[str, str], monkeypatch: pytest.MonkeyPatch
) -> None:
    create_employee(client, "EMP001")
    create_employee(client, "EMP002")
    _fail_first_call(
        monkeypatch,
        KeyLogRepositoryImpl,
        "append",
        IntegrityError("INSERT INTO key_logs", {}, Exception("UNIQUE constraint failed")),
    )

    res = client.post(
        "/import/contracts",
        json={"data": [_row("L/M01/001", "EMP001"), _row("L/M01/002", "EMP002")]},
    )
    assert res.status_code == 207
    body = res.json()
    assert (body["imported"], body["failed"]) == (1, 1)
    assert body["errors"][0]["row"] == 2
    assert "UNIQUE constraint failed" in body["errors"][0]["error"]

    untouched = locker_detail(client, lockers["L/M01/001"])
    assert untouched["locker"]["status"] == "AVAILABLE"
    assert untouched["contracts"] == []
    assert untouched["recent_logs"] == []
    assert [(k["status"], k["holder_id"]) for k in untouched["keys"]] == [("AVAILABLE", None), ("WITH_HRGA", None)]

    imported = locker_detail(client, lockers["L/M01/002"])
    assert imported["locker"]["status"] == "FILLED"
    assert imported["keys"][0]["status"] == "WITH_EMPLOYEE"
    assert len(imported["recent_logs"]) == 1


def test_unexpected_error_fails_only_its_row(
        client: TestClient, lockers: dict[str, str], monkeypatch: pytest.MonkeyPatch
) -> None:
    create_employee(client, "EMP001")
    create_employee(client, "EMP002")
    _fail_first_call(monkeypatch, LockerRepositoryImpl, "set_status", LookupError("Locker vanished"))

    res = client.post(
        "/import/contracts",
        json={"data": [_row("L/M01/001", "EMP001"), _row("L/M01/002", "EMP002")]},
    )
    assert res.status_code == 207
    body = res.json()
    assert (body["imported"], body["failed"]) == (1, 1)
    assert body["errors"] == [
        {"row": 2, "locker_number": "L/M01/001", "employee_nik": "EMP001", "error": "Locker vanished"}
    ]
    assert locker_detail(client, lockers["L/M01/001"])["contracts"] == []
    assert locker_status(client, lockers["L/M01/002"]) == "FILLED"
