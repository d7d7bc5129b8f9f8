from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from lockerkeep.core.clock import Clock
from lockerkeep.core.entities.locker import LockerStatus, RoomConfig
from lockerkeep.core.entities.locker_key import KeyStatus
from lockerkeep.core.errors import ValidationError
from lockerkeep.core.use_cases.assign_contract import AssignContractUseCase
from lockerkeep.core.use_cases.import_assignments import REQUIRED_ASSIGNMENT_HEADERS, ImportAssignmentBatchUseCase
from lockerkeep.core.use_cases.import_employees import REQUIRED_EMPLOYEE_HEADERS, ImportEmployeeBatchUseCase
from lockerkeep.core.use_cases.list_overdue_contracts import ListContractsUseCase, ListOverdueContractsUseCase
from lockerkeep.core.use_cases.lookup_employee_locker import LookupEmployeeLockerUseCase
from lockerkeep.core.use_cases.manage_employees import (
    CreateEmployeeUseCase,
    DeleteEmployeeUseCase,
    GetEmployeeUseCase,
    ListEmployeesUseCase,
    UpdateEmployeeUseCase,
)
from lockerkeep.core.use_cases.manage_keys import (
    CreateKeyUseCase,
    DeleteKeyUseCase,
    GetKeyUseCase,
    ListKeysUseCase,
    UpdateKeyUseCase,
)
from lockerkeep.core.use_cases.manage_lockers import (
    GetLockerDetailUseCase,
    GetLockerStatsUseCase,
    ListLockersUseCase,
    SetLockerOverrideUseCase,
    SyncLockerStatusesUseCase,
)
from lockerkeep.core.use_cases.provision_lockers import ProvisionLockersUseCase
from lockerkeep.core.use_cases.record_key_action import ListKeyLogsUseCase, RecordKeyActionUseCase
from lockerkeep.infrastructure.csv_reader import read_csv_rows
from lockerkeep.infrastructure.repositories.contract_repository_impl import ContractRepositoryImpl
from lockerkeep.infrastructure.repositories.employee_repository_impl import EmployeeRepositoryImpl
from lockerkeep.infrastructure.repositories.key_log_repository_impl import KeyLogRepositoryImpl
from lockerkeep.infrastructure.repositories.locker_key_repository_impl import LockerKeyRepositoryImpl
from lockerkeep.infrastructure.repositories.locker_repository_impl import LockerRepositoryImpl
from lockerkeep.infrastructure.transaction import SqlTransactionManager
from lockerkeep.schemas.models import (
    AssignmentImportOut,
    ContractCreate,
    ContractDetail,
    ContractOut,
    DuplicateEmployeeOut,
    EmployeeCreate,
    EmployeeDetail,
    EmployeeImportOut,
    EmployeeImportResults,
    EmployeeLocker,
    EmployeeOut,
    EmployeeRowErrorOut,
    EmployeeSummary,
    EmployeeUpdate,
    ImportedEmployeeOut,
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
    ProvisionOut,
    SyncStatusesOut,
)


class _Repositories:
    """All repositories plus the transaction manager, bound to one session."""

    def __init__(self, db: Session) -> None:
        self.lockers = LockerRepositoryImpl(db)
        self.employees = EmployeeRepositoryImpl(db)
        self.keys = LockerKeyRepositoryImpl(db)
        self.contracts = ContractRepositoryImpl(db)
        self.key_logs = KeyLogRepositoryImpl(db)
        self.tx = SqlTransactionManager(db)


# -----------------------------
# Lockers
# -----------------------------
def list_lockers_service(
        room_id: str | None, status: LockerStatus | None, db: Session
) -> list[LockerOverview]:
    r = _Repositories(db)
    use_case = ListLockersUseCase(locker_repo=r.lockers, contract_repo=r.contracts, employee_repo=r.employees)
    return [LockerOverview.model_validate(dto) for dto in use_case.execute(room_id=room_id, status=status)]


def get_locker_detail_service(
        db: Session, *, locker_id: str | None = None, locker_number: str | None = None
) -> LockerDetail:
    r = _Repositories(db)
    use_case = GetLockerDetailUseCase(
        locker_repo=r.lockers,
        contract_repo=r.contracts,
        key_repo=r.keys,
        key_log_repo=r.key_logs,
    )
    dto = use_case.execute(locker_id=locker_id, locker_number=locker_number)
    return LockerDetail.model_validate(dto)


def set_locker_status_service(locker_id: str, status: LockerStatus | None, db: Session, clock: Clock) -> LockerOut:
    r = _Repositories(db)
    use_case = SetLockerOverrideUseCase(locker_repo=r.lockers, contract_repo=r.contracts, tx=r.tx, clock=clock)
    return LockerOut.model_validate(use_case.execute(locker_id=locker_id, status=status))


def sync_locker_statuses_service(db: Session, clock: Clock) -> SyncStatusesOut:
    r = _Repositories(db)
    use_case = SyncLockerStatusesUseCase(locker_repo=r.lockers, contract_repo=r.contracts, tx=r.tx, clock=clock)
    return SyncStatusesOut.model_validate(use_case.execute())


def get_locker_stats_service(db: Session) -> LockerStats:
    r = _Repositories(db)
    return LockerStats.model_validate(GetLockerStatsUseCase(locker_repo=r.lockers).execute())


def provision_lockers_service(rooms: list[RoomConfig], db: Session) -> ProvisionOut:
    r = _Repositories(db)
    use_case = ProvisionLockersUseCase(locker_repo=r.lockers, key_repo=r.keys, tx=r.tx)
    return ProvisionOut.model_validate(use_case.execute(rooms))


# -----------------------------
# Contracts and key custody
# -----------------------------
def list_contracts_service(
        locker_id: str | None, overdue_only: bool, db: Session, clock: Clock
) -> list[ContractDetail]:
    r = _Repositories(db)
    use_case_cls = ListOverdueContractsUseCase if overdue_only else ListContractsUseCase
    use_case = use_case_cls(
        contract_repo=r.contracts,
        employee_repo=r.employees,
        locker_repo=r.lockers,
        clock=clock,
    )
    return [ContractDetail.model_validate(dto) for dto in use_case.execute(locker_id=locker_id)]


def assign_contract_service(body: ContractCreate, db: Session, clock: Clock) -> ContractOut:
    r = _Repositories(db)
    use_case = AssignContractUseCase(
        locker_repo=r.lockers,
        employee_repo=r.employees,
        contract_repo=r.contracts,
        tx=r.tx,
        clock=clock,
    )
    contract = use_case.execute(
        locker_id=body.locker_id,
        employee_id=body.employee_id,
        start_date=body.start_date,
        end_date=body.end_date,
        contract_seq=body.contract_seq,
    )
    return ContractOut.model_validate(contract)


def record_key_action_service(body: KeyLogCreate, db: Session, clock: Clock) -> KeyActionOut:
    r = _Repositories(db)
    use_case = RecordKeyActionUseCase(
        locker_repo=r.lockers,
        employee_repo=r.employees,
        contract_repo=r.contracts,
        key_repo=r.keys,
        key_log_repo=r.key_logs,
        tx=r.tx,
        clock=clock,
    )
    result = use_case.execute(
        locker_id=body.locker_id,
        employee_id=body.employee_id,
        action=body.action,
        method=body.method,
        locker_key_id=body.locker_key_id,
    )
    return KeyActionOut.model_validate(result)


def list_key_logs_service(
        locker_id: str | None, employee_id: str | None, limit: int, db: Session
) -> list[KeyLogOut]:
    r = _Repositories(db)
    logs = ListKeyLogsUseCase(key_log_repo=r.key_logs).execute(
        locker_id=locker_id, employee_id=employee_id, limit=limit
    )
    return [KeyLogOut.model_validate(log) for log in logs]


def lookup_employee_locker_service(nik: str, db: Session) -> EmployeeLocker:
    r = _Repositories(db)
    use_case = LookupEmployeeLockerUseCase(
        employee_repo=r.employees,
        contract_repo=r.contracts,
        locker_repo=r.lockers,
        key_log_repo=r.key_logs,
    )
    return EmployeeLocker.model_validate(use_case.execute(nik=nik))


# -----------------------------
# Keys
# -----------------------------
def list_keys_service(
        db: Session,
        *,
        locker_id: str | None = None,
        status: KeyStatus | None = None,
        holder_id: str | None = None,
        room_id: str | None = None,
) -> list[KeyOut]:
    r = _Repositories(db)
    keys = ListKeysUseCase(key_repo=r.keys).execute(
        locker_id=locker_id, status=status, holder_id=holder_id, room_id=room_id
    )
    return [KeyOut.model_validate(k) for k in keys]


def get_key_service(key_id: str, db: Session) -> KeyDetail:
    r = _Repositories(db)
    return KeyDetail.model_validate(GetKeyUseCase(key_repo=r.keys, key_log_repo=r.key_logs).execute(key_id=key_id))


def create_key_service(body: KeyCreate, db: Session) -> KeyOut:
    r = _Repositories(db)
    use_case = CreateKeyUseCase(locker_repo=r.lockers, key_repo=r.keys, tx=r.tx)
    key = use_case.execute(
        locker_id=body.locker_id,
        label=body.label,
        status=body.status,
        physical_key_number=body.physical_key_number,
    )
    return KeyOut.model_validate(key)


def update_key_service(key_id: str, body: KeyUpdate, db: Session) -> KeyOut:
    r = _Repositories(db)
    use_case = UpdateKeyUseCase(key_repo=r.keys, employee_repo=r.employees, tx=r.tx)
    return KeyOut.model_validate(use_case.execute(key_id=key_id, changes=body.model_dump(exclude_unset=True)))


def delete_key_service(key_id: str, db: Session) -> None:
    r = _Repositories(db)
    DeleteKeyUseCase(key_repo=r.keys, tx=r.tx).execute(key_id=key_id)


# -----------------------------
# Employees
# -----------------------------
def list_employees_service(search: str | None, active_only: bool, db: Session) -> list[EmployeeSummary]:
    r = _Repositories(db)
    use_case = ListEmployeesUseCase(employee_repo=r.employees, contract_repo=r.contracts, locker_repo=r.lockers)
    return [EmployeeSummary.model_validate(dto) for dto in use_case.execute(search=search, active_only=active_only)]


def get_employee_service(employee_id: str, db: Session) -> EmployeeDetail:
    r = _Repositories(db)
    use_case = GetEmployeeUseCase(employee_repo=r.employees, contract_repo=r.contracts, key_repo=r.keys)
    return EmployeeDetail.model_validate(use_case.execute(employee_id=employee_id))


def create_employee_service(body: EmployeeCreate, db: Session) -> EmployeeOut:
    r = _Repositories(db)
    employee = CreateEmployeeUseCase(employee_repo=r.employees, tx=r.tx).execute(
        nik=body.nik, name=body.name, department=body.department, is_active=body.is_active
    )
    return EmployeeOut.model_validate(employee)


def update_employee_service(employee_id: str, body: EmployeeUpdate, db: Session) -> EmployeeOut:
    r = _Repositories(db)
    use_case = UpdateEmployeeUseCase(employee_repo=r.employees, tx=r.tx)
    employee = use_case.execute(employee_id=employee_id, changes=body.model_dump(exclude_unset=True))
    return EmployeeOut.model_validate(employee)


def delete_employee_service(employee_id: str, db: Session) -> None:
    r = _Repositories(db)
    DeleteEmployeeUseCase(employee_repo=r.employees, tx=r.tx).execute(employee_id=employee_id)


# -----------------------------
# Batch imports
# -----------------------------
def import_assignments_service(rows: list[dict[str, Any]], db: Session, clock: Clock) -> AssignmentImportOut:
    if not rows:
        raise ValidationError("No data provided")

    r = _Repositories(db)
    use_case = ImportAssignmentBatchUseCase(
        locker_repo=r.lockers,
        employee_repo=r.employees,
        contract_repo=r.contracts,
        key_repo=r.keys,
        key_log_repo=r.key_logs,
        tx=r.tx,
        clock=clock,
    )
    return AssignmentImportOut.model_validate(use_case.execute(rows))


def import_assignments_csv_service(text: str, db: Session, clock: Clock) -> AssignmentImportOut:
    rows = read_csv_rows(text, required_headers=REQUIRED_ASSIGNMENT_HEADERS, normalize_headers=True)
    return import_assignments_service(rows, db, clock)


def import_employees_service(rows: list[dict[str, Any]], db: Session) -> EmployeeImportOut:
    if not rows:
        raise ValidationError("No employee data provided")

    r = _Repositories(db)
    result = ImportEmployeeBatchUseCase(employee_repo=r.employees, tx=r.tx).execute(rows)
    return EmployeeImportOut(
        total=result.total,
        imported=result.imported,
        failed=result.failed,
        duplicates=result.duplicates,
        results=EmployeeImportResults(
            success=[ImportedEmployeeOut.model_validate(row) for row in result.imported_rows],
            errors=[EmployeeRowErrorOut.model_validate(row) for row in result.error_rows],
            duplicates=[DuplicateEmployeeOut.model_validate(row) for row in result.duplicate_rows],
        ),
    )


def import_employees_csv_service(text: str, db: Session) -> EmployeeImportOut:
    rows = read_csv_rows(text, required_headers=REQUIRED_EMPLOYEE_HEADERS)
    return import_employees_service(rows, db)
