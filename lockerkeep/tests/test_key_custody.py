from __future__ import annotations

from starlette.testclient import TestClient

from lockerkeep.tests.helpers import active_contracts, assign, create_employee, locker_detail, locker_status


def _key_action(client: TestClient, locker_id: str, employee_id: str, action: str, method: str = "MANUAL", **extra):
    body = {"locker_id": locker_id, "employee_id": employee_id, "action": action, "method": method, **extra}
    return client.post("/key-logs", json=body)


def test_returned_key_ends_contract_and_frees_locker(client: TestClient, lockers: dict[str, str]) -> None:
    locker_id = lockers["L/M01/001"]
    emp = create_employee(client, "EMP001")
    contract = assign(client, locker_id, emp["id"], "2024-01-01", "2025-01-01").json()

    res = _key_action(client, locker_id, emp["id"], "RETURNED")
    assert res.status_code == 201, res.text
    body = res.json()
    assert body["log"]["action"] == "RETURNED"
    assert body["log"]["method"] == "MANUAL"
    assert body["ended_contract_id"] == contract["id"]

    assert locker_status(client, locker_id) == "AVAILABLE"
    assert active_contracts(client, locker_id) == []
    logs = client.get("/key-logs", params={"locker_id": locker_id}).json()
    assert [log["action"] for log in logs] == ["RETURNED"]


def test_returned_without_active_contract_still_logs(client: TestClient, lockers: dict[str, str]) -> None:
    locker_id = lockers["L/M01/002"]
    emp = create_employee(client, "EMP001")

    res = _key_action(client, locker_id, emp["id"], "RETURNED", method="QR")
    assert res.status_code == 201
    assert res.json()["ended_contract_id"] is None
    assert locker_status(client, locker_id) == "AVAILABLE"


def test_taken_only_appends_to_the_log(client: TestClient, lockers: dict[str, str]) -> None:
    locker_id = lockers["L/M01/001"]
    emp = create_employee(client, "EMP001")
    assign(client, locker_id, emp["id"], "2024-01-01", "2025-01-01")

    res = _key_action(client, locker_id, emp["id"], "TAKEN", method="QR")
    assert res.status_code == 201
    assert res.json()["ended_contract_id"] is None
    assert locker_status(client, locker_id) == "FILLED"
    assert len(active_contracts(client, locker_id)) == 1

    keys = client.get("/keys", params={"locker_id": locker_id}).json()
    assert {k["status"] for k in keys} == {"AVAILABLE", "WITH_HRGA"}


def test_key_log_rejects_unknown_action(client: TestClient, lockers: dict[str, str]) -> None:
    emp = create_employee(client, "EMP001")
    res = _key_action(client, lockers["L/M01/001"], emp["id"], "LOST")
    assert res.status_code == 422


def test_key_log_rejects_key_of_another_locker(client: TestClient, lockers: dict[str, str]) -> None:
    emp = create_employee(client, "EMP001")
    other_key = client.get("/keys", params={"locker_id": lockers["L/M01/002"]}).json()[0]

    res = _key_action(client, lockers["L/M01/001"], emp["id"], "TAKEN", locker_key_id=other_key["id"])
    assert res.status_code == 404
    assert client.get("/key-logs").json() == []


def test_has_key_follows_the_latest_log_entry(client: TestClient, lockers: dict[str, str]) -> None:
    locker_id = lockers["L/M01/001"]
    emp = create_employee(client, "EMP001")
    assign(client, locker_id, emp["id"], "2024-01-01", "2025-01-01")

    lookup = client.get("/qr-lookup", params={"nik": "EMP001"})
    assert lookup.status_code == 200
    assert lookup.json()["has_key"] is False
    assert lookup.json()["locker"]["locker_number"] == "L/M01/001"

    _key_action(client, locker_id, emp["id"], "TAKEN", method="QR")
    assert client.get("/qr-lookup", params={"nik": "EMP001"}).json()["has_key"] is True


def test_qr_lookup_without_assignment_returns_404(client: TestClient, lockers: dict[str, str]) -> None:
    create_employee(client, "EMP001")
    assert client.get("/qr-lookup", params={"nik": "EMP001"}).status_code == 404
    assert client.get("/qr-lookup", params={"nik": "NOPE"}).status_code == 404


def test_key_logs_are_newest_first_and_limited(client: TestClient, lockers: dict[str, str]) -> None:
    locker_id = lockers["L/M01/001"]
    emp = create_employee(client, "EMP001")
    for action in ["TAKEN", "RETURNED", "TAKEN"]:
        _key_action(client, locker_id, emp["id"], action)

    logs = client.get("/key-logs", params={"employee_id": emp["id"]}).json()
    assert [log["action"] for log in logs] == ["TAKEN", "RETURNED", "TAKEN"]
    assert logs[0]["timestamp"] > logs[-1]["timestamp"]

    assert len(client.get("/key-logs", params={"limit": 2}).json()) == 2
    assert client.get("/key-logs", params={"limit": 0}).status_code == 422


def test_provisioned_locker_has_employee_key_and_hrga_backup(client: TestClient, lockers: dict[str, str]) -> None:
    keys = locker_detail(client, lockers["L/M01/003"])["keys"]
    assert [(k["key_number"], k["physical_key_number"], k["label"], k["status"]) for k in keys] == [
        (1, "M01-003", "Employee Key", "AVAILABLE"),
        (2, None, "HRGA Backup", "WITH_HRGA"),
    ]


def test_key_crud(client: TestClient, lockers: dict[str, str]) -> None:
    locker_id = lockers["L/M01/001"]
    emp = create_employee(client, "EMP001")

    created = client.post("/keys", json={"locker_id": locker_id, "label": "Spare"})
    assert created.status_code == 201
    key = created.json()
    assert key["key_number"] == 3
    assert key["status"] == "AVAILABLE"

    res = client.patch(f"/keys/{key['id']}", json={"status": "WITH_EMPLOYEE", "holder_id": emp["id"]})
    assert res.status_code == 200
    assert res.json()["holder_id"] == emp["id"]
    held = client.get("/keys", params={"holder_id": emp["id"]}).json()
    assert [k["id"] for k in held] == [key["id"]]

    res = client.patch(f"/keys/{key['id']}", json={"status": "LOST"})
    assert res.json()["status"] == "LOST"
    assert res.json()["holder_id"] == emp["id"]

    detail = client.get(f"/keys/{key['id']}")
    assert detail.status_code == 200
    assert detail.json()["recent_logs"] == []

    assert client.delete(f"/keys/{key['id']}").status_code == 204
    assert client.get(f"/keys/{key['id']}").status_code == 404


def test_key_with_employee_requires_a_known_holder(client: TestClient, lockers: dict[str, str]) -> None:
    key = client.get("/keys", params={"locker_id": lockers["L/M01/001"]}).json()[0]

    assert client.patch(f"/keys/{key['id']}", json={"status": "WITH_EMPLOYEE"}).status_code == 422
    assert client.patch(f"/keys/{key['id']}", json={"holder_id": "ghost"}).status_code == 404
    assert client.post("/keys", json={"locker_id": lockers["L/M01/001"], "status": "WITH_EMPLOYEE"}).status_code == 422
    assert client.post("/keys", json={"locker_id": "missing"}).status_code == 404
