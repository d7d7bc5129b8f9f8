from __future__ import annotations

from dataclasses import dataclass

import structlog

from lockerkeep.core.clock import Clock
from lockerkeep.core.entities.contract import Contract
from lockerkeep.core.entities.employee import Employee
from lockerkeep.core.entities.key_log import KeyLog
from lockerkeep.core.entities.locker import Locker, LockerStatus, OVERRIDE_STATUSES, derive_status
from lockerkeep.core.entities.locker_key import LockerKey
from lockerkeep.core.errors import NotFoundError, ValidationError
from lockerkeep.core.repositories.contract_repository import ContractRepository
from lockerkeep.core.repositories.employee_repository import EmployeeRepository
from lockerkeep.core.repositories.key_log_repository import KeyLogRepository
from lockerkeep.core.repositories.locker_key_repository import LockerKeyRepository
from lockerkeep.core.repositories.locker_repository import LockerRepository
from lockerkeep.core.repositories.transaction import TransactionManager

logger = structlog.get_logger(__name__)

RECENT_LOCKER_LOGS = 20


@dataclass(frozen=True, slots=True)
class LockerOverviewDTO:
    locker: Locker
    current_contract: Contract | None
    current_employee: Employee | None


@dataclass(frozen=True, slots=True)
class LockerDetailDTO:
    locker: Locker
    current_contract: Contract | None
    contracts: list[Contract]
    keys: list[LockerKey]
    recent_logs: list[KeyLog]


@dataclass(frozen=True, slots=True)
class LockerStatsDTO:
    total: int
    available: int
    filled: int
    overdue: int
    maintenance: int
    unidentified: int


@dataclass(frozen=True, slots=True)
class SyncStatusesResult:
    checked: int
    changed: int


class ListLockersUseCase:
    def __init__(
            self,
            *,
            locker_repo: LockerRepository,
            contract_repo: ContractRepository,
            employee_repo: EmployeeRepository,
    ) -> None:
        self._locker_repo = locker_repo
        self._contract_repo = contract_repo
        self._employee_repo = employee_repo

    def execute(self, *, room_id: str | None = None, status: LockerStatus | None = None) -> list[LockerOverviewDTO]:
        active_by_locker = {c.locker_id: c for c in self._contract_repo.list_active()}
        result = []
        for locker in self._locker_repo.list(room_id=room_id, status=status):
            contract = active_by_locker.get(locker.id)
            employee = self._employee_repo.get(contract.employee_id) if contract else None
            result.append(LockerOverviewDTO(locker=locker, current_contract=contract, current_employee=employee))
        return result


class GetLockerDetailUseCase:
    """Lookup by id or by exact locker number (as printed on the locker / QR label)."""

    def __init__(
            self,
            *,
            locker_repo: LockerRepository,
            contract_repo: ContractRepository,
            key_repo: LockerKeyRepository,
            key_log_repo: KeyLogRepository,
    ) -> None:
        self._locker_repo = locker_repo
        self._contract_repo = contract_repo
        self._key_repo = key_repo
        self._key_log_repo = key_log_repo

    def execute(self, *, locker_id: str | None = None, locker_number: str | None = None) -> LockerDetailDTO:
        if locker_id:
            locker = self._locker_repo.get(locker_id)
        elif locker_number:
            locker = self._locker_repo.get_by_number(locker_number)
        else:
            raise ValidationError("locker_id or locker_number is required")
        if locker is None:
            raise NotFoundError("Locker not found")

        contracts = sorted(self._contract_repo.list(locker_id=locker.id), key=lambda c: c.contract_seq, reverse=True)
        return LockerDetailDTO(
            locker=locker,
            current_contract=next((c for c in contracts if c.is_active), None),
            contracts=contracts,
            keys=self._key_repo.list_for_locker(locker.id),
            recent_logs=self._key_log_repo.list(locker_id=locker.id, limit=RECENT_LOCKER_LOGS),
        )


class SetLockerOverrideUseCase:
    """
    Put a locker under an operator override (MAINTENANCE / UNIDENTIFIED) or lift it.

    Lifting (status None) re-derives the status from the active contract.
    """

    def __init__(
            self,
            *,
            locker_repo: LockerRepository,
            contract_repo: ContractRepository,
            tx: TransactionManager,
            clock: Clock,
    ) -> None:
        self._locker_repo = locker_repo
        self._contract_repo = contract_repo
        self._tx = tx
        self._clock = clock

    def execute(self, *, locker_id: str, status: LockerStatus | None) -> Locker:
        locker = self._locker_repo.get(locker_id)
        if locker is None:
            raise NotFoundError("Locker not found")

        if status is None:
            active = self._contract_repo.get_active(locker_id)
            locker.status = derive_status(
                has_active_contract=active is not None,
                end_date=active.end_date if active else None,
                today=self._clock.today(),
            )
        elif status in OVERRIDE_STATUSES:
            locker.set_override(status)
        else:
            raise ValidationError(
                f"{status.value} is derived from contracts; only MAINTENANCE or UNIDENTIFIED can be set"
            )

        with self._tx.atomic():
            self._locker_repo.set_status(locker_id, locker.status)
        logger.info("locker_status_set", locker_number=locker.locker_number, status=locker.status.value)
        return locker


class SyncLockerStatusesUseCase:
    """
    Re-derive the cached status of every locker not under an operator override, as of today.

    Catches lockers whose contract ran out since the status was last written.
    """

    def __init__(
            self,
            *,
            locker_repo: LockerRepository,
            contract_repo: ContractRepository,
            tx: TransactionManager,
            clock: Clock,
    ) -> None:
        self._locker_repo = locker_repo
        self._contract_repo = contract_repo
        self._tx = tx
        self._clock = clock

    def execute(self) -> SyncStatusesResult:
        today = self._clock.today()
        active_by_locker = {c.locker_id: c for c in self._contract_repo.list_active()}

        checked = changed = 0
        with self._tx.atomic():
            for locker in self._locker_repo.list():
                if locker.is_overridden:
                    continue
                checked += 1
                active = active_by_locker.get(locker.id)
                status = derive_status(
                    has_active_contract=active is not None,
                    end_date=active.end_date if active else None,
                    today=today,
                )
                if status is not locker.status:
                    self._locker_repo.set_status(locker.id, status)
                    changed += 1

        logger.info("locker_statuses_synced", checked=checked, changed=changed)
        return SyncStatusesResult(checked=checked, changed=changed)


class GetLockerStatsUseCase:
    def __init__(self, *, locker_repo: LockerRepository) -> None:
        self._locker_repo = locker_repo

    def execute(self) -> LockerStatsDTO:
        counts = self._locker_repo.count_by_status()
        return LockerStatsDTO(
            total=sum(counts.values()),
            available=counts.get(LockerStatus.AVAILABLE, 0),
            filled=counts.get(LockerStatus.FILLED, 0),
            overdue=counts.get(LockerStatus.OVERDUE, 0),
            maintenance=counts.get(LockerStatus.MAINTENANCE, 0),
            unidentified=counts.get(LockerStatus.UNIDENTIFIED, 0),
        )
