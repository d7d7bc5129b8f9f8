from __future__ import annotations

from datetime import date

from starlette.testclient import TestClient

from lockerkeep.tests.helpers import FixedClock, active_contracts, assign, create_employee, locker_detail, locker_status


def test_assign_available_locker_fills_it_with_first_contract(client: TestClient, lockers: dict[str, str]) -> None:
    locker_id = lockers["L/M01/001"]
    emp = create_employee(client, "EMP001")

    res = assign(client, locker_id, emp["id"], "2024-01-01", "2025-01-01")
    assert res.status_code == 201, res.text
    contract = res.json()
    assert contract["contract_seq"] == 1
    assert contract["is_active"] is True

    assert locker_status(client, locker_id) == "FILLED"
    active = active_contracts(client, locker_id)
    assert [c["id"] for c in active] == [contract["id"]]


def test_reassign_supersedes_previous_contract(client: TestClient, lockers: dict[str, str]) -> None:
    locker_id = lockers["L/M01/001"]
    first = create_employee(client, "EMP001")
    second = create_employee(client, "EMP002", name="Sari")

    c1 = assign(client, locker_id, first["id"], "2024-01-01", "2025-01-01").json()
    res = assign(client, locker_id, second["id"], "2024-02-01", "2025-02-01", contract_seq=2)
    assert res.status_code == 201, res.text
    c2 = res.json()

    detail = locker_detail(client, locker_id)
    by_id = {c["id"]: c for c in detail["contracts"]}
    assert by_id[c1["id"]]["is_active"] is False
    assert by_id[c2["id"]]["is_active"] is True
    assert c2["contract_seq"] == 2
    assert detail["current_contract"]["id"] == c2["id"]
    assert detail["locker"]["status"] == "FILLED"


def test_renewal_for_same_employee_still_keeps_a_single_active_contract(
        client: TestClient, lockers: dict[str, str]
) -> None:
    locker_id = lockers["L/M01/002"]
    emp = create_employee(client, "EMP001")

    for start, end in [("2023-01-01", "2024-01-01"), ("2024-01-01", "2025-01-01"), ("2025-01-01", None)]:
        assert assign(client, locker_id, emp["id"], start, end).status_code == 201

    active = active_contracts(client, locker_id)
    assert len(active) == 1
    assert active[0]["contract_seq"] == 3
    assert active[0]["end_date"] is None
    seqs = sorted(c["contract_seq"] for c in locker_detail(client, locker_id)["contracts"])
    assert seqs == [1, 2, 3]


def test_backdated_contract_makes_locker_overdue_and_listed(client: TestClient, lockers: dict[str, str]) -> None:
    locker_id = lockers["L/M01/001"]
    emp = create_employee(client, "EMP001")

    contract = assign(client, locker_id, emp["id"], "2019-01-01", "2020-01-01").json()
    assert locker_status(client, locker_id) == "OVERDUE"

    res = client.get("/contracts/overdue")
    assert res.status_code == 200
    overdue = res.json()
    assert [o["contract"]["id"] for o in overdue] == [contract["id"]]
    assert overdue[0]["urgency"] == "OVERDUE"
    assert overdue[0]["remaining_days"] < 0
    assert overdue[0]["employee"]["nik"] == "EMP001"
    assert overdue[0]["locker"]["locker_number"] == "L/M01/001"


def test_overdue_listing_is_ordered_and_read_only(client: TestClient, lockers: dict[str, str]) -> None:
    emp1 = create_employee(client, "EMP001")
    emp2 = create_employee(client, "EMP002")
    emp3 = create_employee(client, "EMP003")
    assign(client, lockers["L/M01/001"], emp1["id"], "2023-01-01", "2024-05-01")
    assign(client, lockers["L/M01/002"], emp2["id"], "2022-01-01", "2023-01-01")
    assign(client, lockers["L/M01/003"], emp3["id"], "2024-01-01", "2024-12-31")

    first = client.get("/contracts/overdue").json()
    second = client.get("/contracts", params={"overdue_only": True}).json()

    assert first == second
    assert [o["locker"]["locker_number"] for o in first] == ["L/M01/002", "L/M01/001"]
    assert locker_status(client, lockers["L/M01/003"]) == "FILLED"
    assert len(client.get("/contracts").json()) == 3


def test_overdue_is_evaluated_against_the_current_day(
        client: TestClient, clock: FixedClock, lockers: dict[str, str]
) -> None:
    emp = create_employee(client, "EMP001")
    assign(client, lockers["L/M01/001"], emp["id"], "2024-01-01", "2024-06-15")
    assert client.get("/contracts/overdue").json() == []

    clock.current = date(2024, 6, 16)
    overdue = client.get("/contracts/overdue").json()
    assert len(overdue) == 1
    assert overdue[0]["remaining_days"] == -1
    assert overdue[0]["remaining_text"] == "1 days overdue"


def test_permanent_contract_is_never_overdue(client: TestClient, clock: FixedClock, lockers: dict[str, str]) -> None:
    emp = create_employee(client, "EMP001")
    assign(client, lockers["L/M01/001"], emp["id"], "1999-01-01")

    clock.current = date(2099, 1, 1)
    assert client.get("/contracts/overdue").json() == []
    contracts = client.get("/contracts").json()
    assert contracts[0]["remaining_days"] is None
    assert contracts[0]["urgency"] is None


def test_start_date_must_precede_end_date(client: TestClient, lockers: dict[str, str]) -> None:
    locker_id = lockers["L/M01/001"]
    emp = create_employee(client, "EMP001")

    res = assign(client, locker_id, emp["id"], "2024-01-01", "2024-01-01")
    assert res.status_code == 422
    assert res.json()["detail"] == "start_date must be before end_date"
    assert locker_status(client, locker_id) == "AVAILABLE"
    assert locker_detail(client, locker_id)["contracts"] == []


def test_assign_unknown_locker_or_employee_returns_404(client: TestClient, lockers: dict[str, str]) -> None:
    emp = create_employee(client, "EMP001")
    assert assign(client, "no-such-locker", emp["id"], "2024-01-01").status_code == 404
    assert assign(client, lockers["L/M01/001"], "no-such-employee", "2024-01-01").status_code == 404


def test_reused_contract_seq_is_rejected_without_side_effects(client: TestClient, lockers: dict[str, str]) -> None:
    locker_id = lockers["L/M01/001"]
    emp = create_employee(client, "EMP001")
    first = assign(client, locker_id, emp["id"], "2024-01-01", "2025-01-01").json()

    res = assign(client, locker_id, emp["id"], "2024-03-01", "2025-03-01", contract_seq=1)
    assert res.status_code == 409

    active = active_contracts(client, locker_id)
    assert [c["id"] for c in active] == [first["id"]]


def test_contract_seq_may_skip_ahead(client: TestClient, lockers: dict[str, str]) -> None:
    locker_id = lockers["L/M01/001"]
    emp = create_employee(client, "EMP001")
    assign(client, locker_id, emp["id"], "2024-01-01", "2025-01-01", contract_seq=5)

    res = assign(client, locker_id, emp["id"], "2025-01-01", "2026-01-01")
    assert res.json()["contract_seq"] == 6
