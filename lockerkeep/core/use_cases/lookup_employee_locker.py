from __future__ import annotations

from dataclasses import dataclass

from lockerkeep.core.entities.contract import Contract
from lockerkeep.core.entities.employee import Employee
from lockerkeep.core.entities.locker import Locker
from lockerkeep.core.errors import NotFoundError, ValidationError
from lockerkeep.core.repositories.contract_repository import ContractRepository
from lockerkeep.core.repositories.employee_repository import EmployeeRepository
from lockerkeep.core.repositories.key_log_repository import KeyLogRepository
from lockerkeep.core.repositories.locker_repository import LockerRepository
from lockerkeep.core.use_cases.record_key_action import HasKeyQuery


@dataclass(frozen=True, slots=True)
class EmployeeLockerDTO:
    """
    What a badge scan resolves to: who, which locker, under which contract, and whether they hold the key.
    """
    employee: Employee
    locker: Locker
    contract: Contract
    has_key: bool


class LookupEmployeeLockerUseCase:
    def __init__(
            self,
            *,
            employee_repo: EmployeeRepository,
            contract_repo: ContractRepository,
            locker_repo: LockerRepository,
            key_log_repo: KeyLogRepository,
    ) -> None:
        self._employee_repo = employee_repo
        self._contract_repo = contract_repo
        self._locker_repo = locker_repo
        self._has_key = HasKeyQuery(key_log_repo=key_log_repo)

    def execute(self, *, nik: str) -> EmployeeLockerDTO:
        if not nik or not nik.strip():
            raise ValidationError("NIK is required")

        employee = self._employee_repo.get_by_nik(nik.strip())
        if employee is None:
            raise NotFoundError("Employee not found")

        contract = self._contract_repo.get_active_for_employee(employee.id)
        if contract is None:
            raise NotFoundError("No active locker assignment found")

        locker = self._locker_repo.get(contract.locker_id)
        if locker is None:
            raise NotFoundError("Locker not found")

        return EmployeeLockerDTO(
            employee=employee,
            locker=locker,
            contract=contract,
            has_key=self._has_key.execute(locker_id=locker.id, employee_id=employee.id),
        )
