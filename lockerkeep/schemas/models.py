from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from lockerkeep.core.dates import Urgency
from lockerkeep.core.entities.key_log import KeyAction, KeyMethod
from lockerkeep.core.entities.locker import LockerStatus
from lockerkeep.core.entities.locker_key import KeyStatus


class Schema(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Employees

class EmployeeOut(Schema):
    id: str
    nik: str
    name: str
    department: str
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class EmployeeSummary(Schema):
    employee: EmployeeOut
    active_locker_numbers: list[str]


class EmployeeCreate(BaseModel):
    nik: str
    name: str
    department: str
    is_active: bool = True


class EmployeeUpdate(BaseModel):
    nik: str | None = None
    name: str | None = None
    department: str | None = None
    is_active: bool | None = None


# Lockers

class LockerOut(Schema):
    id: str
    locker_number: str
    room_id: str
    status: LockerStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LockerStatusUpdate(BaseModel):
    """`null` lifts an operator override."""
    status: LockerStatus | None = None


class LockerStats(Schema):
    total: int
    available: int
    filled: int
    overdue: int
    maintenance: int
    unidentified: int


class SyncStatusesOut(Schema):
    checked: int
    changed: int


class RoomOut(Schema):
    room_id: str
    name: str
    count: int
    columns: int


class ProvisionOut(Schema):
    lockers_created: int
    keys_created: int


# Keys

class KeyOut(Schema):
    id: str
    locker_id: str
    key_number: int
    physical_key_number: str | None = None
    label: str | None = None
    status: KeyStatus
    holder_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class KeyCreate(BaseModel):
    locker_id: str
    label: str | None = None
    status: KeyStatus | None = None
    physical_key_number: str | None = None


class KeyUpdate(BaseModel):
    status: KeyStatus | None = None
    holder_id: str | None = None
    label: str | None = None
    physical_key_number: str | None = None


# Contracts and key logs

class ContractOut(Schema):
    id: str
    employee_id: str
    locker_id: str
    contract_seq: int
    start_date: date
    end_date: date | None = None
    is_active: bool
    created_at: datetime | None = None


class ContractDetail(Schema):
    contract: ContractOut
    employee: EmployeeOut | None = None
    locker: LockerOut | None = None
    remaining_days: int | None = None
    urgency: Urgency | None = None
    remaining_text: str | None = None


class ContractCreate(BaseModel):
    locker_id: str
    employee_id: str
    start_date: date
    end_date: date | None = None
    contract_seq: int | None = Field(default=None, ge=1)


class KeyLogOut(Schema):
    id: str
    locker_id: str
    locker_key_id: str | None = None
    employee_id: str
    action: KeyAction
    method: KeyMethod
    timestamp: datetime


class KeyLogCreate(BaseModel):
    locker_id: str
    employee_id: str
    action: KeyAction
    method: KeyMethod
    locker_key_id: str | None = None


class KeyActionOut(Schema):
    log: KeyLogOut
    ended_contract_id: str | None = None


class KeyDetail(Schema):
    key: KeyOut
    recent_logs: list[KeyLogOut]


class EmployeeDetail(Schema):
    employee: EmployeeOut
    contracts: list[ContractOut]
    held_keys: list[KeyOut]


class LockerOverview(Schema):
    locker: LockerOut
    current_contract: ContractOut | None = None
    current_employee: EmployeeOut | None = None


class LockerDetail(Schema):
    locker: LockerOut
    current_contract: ContractOut | None = None
    contracts: list[ContractOut]
    keys: list[KeyOut]
    recent_logs: list[KeyLogOut]


class EmployeeLocker(Schema):
    employee: EmployeeOut
    locker: LockerOut
    contract: ContractOut
    has_key: bool


# Imports

class AssignmentRowIn(BaseModel):
    locker_number: str | None = None
    employee_nik: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    notes: str | None = None


class AssignmentImportRequest(BaseModel):
    data: list[AssignmentRowIn]


class ImportRowErrorOut(Schema):
    row: int
    locker_number: str | None = None
    employee_nik: str | None = None
    error: str


class AssignmentImportOut(Schema):
    success: bool
    imported: int
    failed: int
    errors: list[ImportRowErrorOut]


class EmployeeRowIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    nik: str | None = None
    name: str | None = None
    department: str | None = None
    is_active: Any = Field(default=None, alias="isActive")


class EmployeeImportRequest(BaseModel):
    employees: list[EmployeeRowIn]


class ImportedEmployeeOut(Schema):
    row: int
    nik: str
    name: str


class EmployeeRowErrorOut(Schema):
    row: int
    nik: str | None = None
    errors: list[str]


class DuplicateEmployeeOut(Schema):
    row: int
    nik: str
    name: str | None = None
    message: str


class EmployeeImportResults(BaseModel):
    success: list[ImportedEmployeeOut]
    errors: list[EmployeeRowErrorOut]
    duplicates: list[DuplicateEmployeeOut]


class EmployeeImportOut(BaseModel):
    total: int
    imported: int
    failed: int
    duplicates: int
    results: EmployeeImportResults
