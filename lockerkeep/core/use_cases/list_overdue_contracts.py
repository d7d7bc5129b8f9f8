from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from lockerkeep.core.clock import Clock
from lockerkeep.core.dates import Urgency, classify_urgency, format_remaining_days, is_overdue, remaining_days
from lockerkeep.core.entities.contract import Contract
from lockerkeep.core.entities.employee import Employee
from lockerkeep.core.entities.locker import Locker
from lockerkeep.core.repositories.contract_repository import ContractRepository
from lockerkeep.core.repositories.employee_repository import EmployeeRepository
from lockerkeep.core.repositories.locker_repository import LockerRepository


@dataclass(frozen=True, slots=True)
class ContractDetailDTO:
    contract: Contract
    employee: Employee | None
    locker: Locker | None
    remaining_days: int | None = None
    urgency: Urgency | None = None
    remaining_text: str | None = None


def describe_contract(
        contract: Contract,
        *,
        employee_repo: EmployeeRepository,
        locker_repo: LockerRepository,
        today: date,
) -> ContractDetailDTO:
    days = None if contract.is_permanent else remaining_days(contract.end_date, today)
    return ContractDetailDTO(
        contract=contract,
        employee=employee_repo.get(contract.employee_id),
        locker=locker_repo.get(contract.locker_id),
        remaining_days=days,
        urgency=None if days is None else classify_urgency(days),
        remaining_text=None if days is None else format_remaining_days(days),
    )


class ListOverdueContractsUseCase:
    """
    Active contracts whose end date has passed, longest-overdue first. Read-only.

    Permanent contracts (no end date) are never part of the result.
    """

    def __init__(
            self,
            *,
            contract_repo: ContractRepository,
            employee_repo: EmployeeRepository,
            locker_repo: LockerRepository,
            clock: Clock,
    ) -> None:
        self._contract_repo = contract_repo
        self._employee_repo = employee_repo
        self._locker_repo = locker_repo
        self._clock = clock

    def execute(self, *, locker_id: str | None = None) -> list[ContractDetailDTO]:
        today = self._clock.today()
        candidates = self._contract_repo.list_active_with_end_date(locker_id=locker_id)
        return [
            describe_contract(c, employee_repo=self._employee_repo, locker_repo=self._locker_repo, today=today)
            for c in candidates
            if not c.is_permanent and is_overdue(c.end_date, today)
        ]


class ListContractsUseCase:
    def __init__(
            self,
            *,
            contract_repo: ContractRepository,
            employee_repo: EmployeeRepository,
            locker_repo: LockerRepository,
            clock: Clock,
    ) -> None:
        self._contract_repo = contract_repo
        self._employee_repo = employee_repo
        self._locker_repo = locker_repo
        self._clock = clock

    def execute(self, *, locker_id: str | None = None) -> list[ContractDetailDTO]:
        today = self._clock.today()
        return [
            describe_contract(c, employee_repo=self._employee_repo, locker_repo=self._locker_repo, today=today)
            for c in self._contract_repo.list(locker_id=locker_id)
        ]
