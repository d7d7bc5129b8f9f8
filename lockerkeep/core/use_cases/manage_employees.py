from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

import structlog

from lockerkeep.core.entities.contract import Contract
from lockerkeep.core.entities.employee import Employee
from lockerkeep.core.entities.locker_key import LockerKey
from lockerkeep.core.errors import ConflictError, NotFoundError, ValidationError
from lockerkeep.core.repositories.contract_repository import ContractRepository
from lockerkeep.core.repositories.employee_repository import EmployeeRepository
from lockerkeep.core.repositories.locker_key_repository import LockerKeyRepository
from lockerkeep.core.repositories.locker_repository import LockerRepository
from lockerkeep.core.repositories.transaction import TransactionManager

logger = structlog.get_logger(__name__)

_EDITABLE_FIELDS = ("nik", "name", "department", "is_active")


@dataclass(frozen=True, slots=True)
class EmployeeSummaryDTO:
    employee: Employee
    active_locker_numbers: list[str]


@dataclass(frozen=True, slots=True)
class EmployeeDetailDTO:
    employee: Employee
    contracts: list[Contract]
    held_keys: list[LockerKey]


def _require_text(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} is required")
    return value.strip()


class ListEmployeesUseCase:
    def __init__(
            self,
            *,
            employee_repo: EmployeeRepository,
            contract_repo: ContractRepository,
            locker_repo: LockerRepository,
    ) -> None:
        self._employee_repo = employee_repo
        self._contract_repo = contract_repo
        self._locker_repo = locker_repo

    def execute(self, *, search: str | None = None, active_only: bool = False) -> list[EmployeeSummaryDTO]:
        lockers_by_employee: dict[str, list[str]] = {}
        for contract in self._contract_repo.list_active():
            locker = self._locker_repo.get(contract.locker_id)
            if locker is not None:
                lockers_by_employee.setdefault(contract.employee_id, []).append(locker.locker_number)

        return [
            EmployeeSummaryDTO(employee=e, active_locker_numbers=sorted(lockers_by_employee.get(e.id, [])))
            for e in self._employee_repo.list(search=search, active_only=active_only)
        ]


class GetEmployeeUseCase:
    def __init__(
            self,
            *,
            employee_repo: EmployeeRepository,
            contract_repo: ContractRepository,
            key_repo: LockerKeyRepository,
    ) -> None:
        self._employee_repo = employee_repo
        self._contract_repo = contract_repo
        self._key_repo = key_repo

    def execute(self, *, employee_id: str) -> EmployeeDetailDTO:
        employee = self._employee_repo.get(employee_id)
        if employee is None:
            raise NotFoundError("Employee not found")
        return EmployeeDetailDTO(
            employee=employee,
            contracts=self._contract_repo.list(employee_id=employee_id),
            held_keys=self._key_repo.list(holder_id=employee_id),
        )


class CreateEmployeeUseCase:
    def __init__(self, *, employee_repo: EmployeeRepository, tx: TransactionManager) -> None:
        self._employee_repo = employee_repo
        self._tx = tx

    def execute(self, *, nik: str, name: str, department: str, is_active: bool = True) -> Employee:
        nik = _require_text(nik, "nik")
        name = _require_text(name, "name")
        department = _require_text(department, "department")

        if self._employee_repo.get_by_nik(nik) is not None:
            raise ConflictError("Employee with this NIK already exists")

        with self._tx.atomic():
            employee = self._employee_repo.add(
                Employee(nik=nik, name=name, department=department, is_active=is_active)
            )
        logger.info("employee_created", nik=employee.nik)
        return employee


class UpdateEmployeeUseCase:
    """PATCH semantics: only the given fields change."""

    def __init__(self, *, employee_repo: EmployeeRepository, tx: TransactionManager) -> None:
        self._employee_repo = employee_repo
        self._tx = tx

    def execute(self, *, employee_id: str, changes: dict[str, Any]) -> Employee:
        employee = self._employee_repo.get(employee_id)
        if employee is None:
            raise NotFoundError("Employee not found")

        updates = {k: v for k, v in changes.items() if k in _EDITABLE_FIELDS}
        for name in ("nik", "name", "department"):
            if name in updates:
                updates[name] = _require_text(updates[name], name)
        if "is_active" in updates and not isinstance(updates["is_active"], bool):
            raise ValidationError("is_active must be a boolean")

        if "nik" in updates and updates["nik"] != employee.nik:
            if self._employee_repo.get_by_nik(updates["nik"]) is not None:
                raise ConflictError("NIK already exists")

        with self._tx.atomic():
            return self._employee_repo.update(replace(employee, **updates))


class DeleteEmployeeUseCase:
    """
    Employees referenced by contracts, key logs or held keys are kept: the history must stay resolvable.
    """

    def __init__(self, *, employee_repo: EmployeeRepository, tx: TransactionManager) -> None:
        self._employee_repo = employee_repo
        self._tx = tx

    def execute(self, *, employee_id: str) -> None:
        employee = self._employee_repo.get(employee_id)
        if employee is None:
            raise NotFoundError("Employee not found")
        if self._employee_repo.is_referenced(employee_id):
            raise ConflictError(
                f"Employee {employee.nik!r} is referenced by contracts, key logs or keys and cannot be deleted"
            )

        with self._tx.atomic():
            self._employee_repo.delete(employee_id)
        logger.info("employee_deleted", nik=employee.nik)
