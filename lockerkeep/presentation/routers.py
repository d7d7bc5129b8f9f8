from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from lockerkeep.core.clock import Clock
from lockerkeep.core.entities.locker import LockerStatus
from lockerkeep.core.entities.locker_key import KeyStatus
from lockerkeep.infrastructure.clock import SystemClock
from lockerkeep.infrastructure.config import settings
from lockerkeep.infrastructure.database import SessionLocal
from lockerkeep.infrastructure.rooms import load_room_configs
from lockerkeep.schemas.models import (
    ContractCreate,
    ContractDetail,
    ContractOut,
    KeyActionOut,
    KeyCreate,
    KeyDetail,
    KeyLogCreate,
    KeyLogOut,
    KeyOut,
    KeyUpdate,
    LockerDetail,
    LockerOut,
    LockerOverview,
    LockerStats,
    LockerStatusUpdate,
    ProvisionOut,
    RoomOut,
    SyncStatusesOut,
)
from lockerkeep.services.lockerkeep_service import (
    assign_contract_service,
    create_key_service,
    delete_key_service,
    get_key_service,
    get_locker_detail_service,
    get_locker_stats_service,
    list_contracts_service,
    list_key_logs_service,
    list_keys_service,
    list_lockers_service,
    provision_lockers_service,
    record_key_action_service,
    set_locker_status_service,
    sync_locker_statuses_service,
    update_key_service,
)

router = APIRouter()


def get_db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_clock() -> Clock:
    return SystemClock()


# -----------------------------
# Facility
# -----------------------------
@router.get("/rooms", response_model=list[RoomOut])
def get_rooms() -> list[RoomOut]:
    return [RoomOut.model_validate(room) for room in load_room_configs(settings.rooms_path)]


@router.post("/lockers/provision", response_model=ProvisionOut)
def post_lockers_provision(db: Session = Depends(get_db)) -> ProvisionOut:
    """
    Create missing lockers (and their two keys) for every configured room
    """
    return provision_lockers_service(load_room_configs(settings.rooms_path), db)


@router.get("/stats", response_model=LockerStats)
@router.get("/lockers/stats", response_model=LockerStats)
def get_stats(db: Session = Depends(get_db)) -> LockerStats:
    return get_locker_stats_service(db)


# -----------------------------
# Lockers
# -----------------------------
@router.get("/lockers", response_model=list[LockerOverview])
def get_lockers(
    room_id: str | None = None,
    status: LockerStatus | None = None,
    db: Session = Depends(get_db),
) -> list[LockerOverview]:
    return list_lockers_service(room_id, status, db)


@router.get("/lockers/search", response_model=LockerDetail)
def get_lockers_search(locker_number: str = Query(..., min_length=1), db: Session = Depends(get_db)) -> LockerDetail:
    """
    Find a locker by its exact number, e.g. L/M01/054
    """
    return get_locker_detail_service(db, locker_number=locker_number)


@router.post("/lockers/sync-status", response_model=SyncStatusesOut)
def post_lockers_sync_status(
    db: Session = Depends(get_db), clock: Clock = Depends(get_clock)
) -> SyncStatusesOut:
    return sync_locker_statuses_service(db, clock)


@router.get("/lockers/{locker_id}", response_model=LockerDetail)
def get_lockers_locker_id(locker_id: str, db: Session = Depends(get_db)) -> LockerDetail:
    return get_locker_detail_service(db, locker_id=locker_id)


@router.patch("/lockers/{locker_id}", response_model=LockerOut)
def patch_lockers_locker_id(
    locker_id: str,
    body: LockerStatusUpdate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> LockerOut:
    """
    Set or lift an operator override (MAINTENANCE / UNIDENTIFIED)
    """
    return set_locker_status_service(locker_id, body.status, db, clock)


# -----------------------------
# Contracts
# -----------------------------
@router.get("/contracts", response_model=list[ContractDetail])
def get_contracts(
    locker_id: str | None = None,
    overdue_only: bool = False,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> list[ContractDetail]:
    return list_contracts_service(locker_id, overdue_only, db, clock)


@router.get("/contracts/overdue", response_model=list[ContractDetail])
def get_contracts_overdue(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)) -> list[ContractDetail]:
    """
    Active contracts past their end date, longest-overdue first
    """
    return list_contracts_service(None, True, db, clock)


@router.post("/contracts", response_model=ContractOut, status_code=201)
def post_contracts(
    body: ContractCreate, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)
) -> ContractOut:
    """
    Assign (or renew) a locker; supersedes the locker's active contract
    """
    return assign_contract_service(body, db, clock)


# -----------------------------
# Key custody
# -----------------------------
@router.get("/key-logs", response_model=list[KeyLogOut])
def get_key_logs(
    locker_id: str | None = None,
    employee_id: str | None = None,
    limit: int = Query(default=settings.key_log_page_size, ge=1, le=500),
    db: Session = Depends(get_db),
) -> list[KeyLogOut]:
    return list_key_logs_service(locker_id, employee_id, limit, db)


@router.post("/key-logs", response_model=KeyActionOut, status_code=201)
def post_key_logs(
    body: KeyLogCreate, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)
) -> KeyActionOut:
    """
    Record a key TAKEN / RETURNED. RETURNED ends the active contract and frees the locker
    """
    return record_key_action_service(body, db, clock)


@router.get("/keys", response_model=list[KeyOut])
def get_keys(
    locker_id: str | None = None,
    status: KeyStatus | None = None,
    holder_id: str | None = None,
    room_id: str | None = None,
    db: Session = Depends(get_db),
) -> list[KeyOut]:
    return list_keys_service(db, locker_id=locker_id, status=status, holder_id=holder_id, room_id=room_id)


@router.post("/keys", response_model=KeyOut, status_code=201)
def post_keys(body: KeyCreate, db: Session = Depends(get_db)) -> KeyOut:
    return create_key_service(body, db)


@router.get("/keys/{key_id}", response_model=KeyDetail)
def get_keys_key_id(key_id: str, db: Session = Depends(get_db)) -> KeyDetail:
    return get_key_service(key_id, db)


@router.patch("/keys/{key_id}", response_model=KeyOut)
def patch_keys_key_id(key_id: str, body: KeyUpdate, db: Session = Depends(get_db)) -> KeyOut:
    return update_key_service(key_id, body, db)


@router.delete("/keys/{key_id}", status_code=204, response_model=None)
def delete_keys_key_id(key_id: str, db: Session = Depends(get_db)) -> Response:
    delete_key_service(key_id, db)
    return Response(status_code=204)
