from __future__ import annotations

from dataclasses import dataclass

import structlog

from lockerkeep.core.clock import Clock
from lockerkeep.core.entities.key_log import KeyAction, KeyLog, KeyMethod
from lockerkeep.core.errors import NotFoundError, ValidationError
from lockerkeep.core.repositories.contract_repository import ContractRepository
from lockerkeep.core.repositories.employee_repository import EmployeeRepository
from lockerkeep.core.repositories.key_log_repository import KeyLogRepository
from lockerkeep.core.repositories.locker_key_repository import LockerKeyRepository
from lockerkeep.core.repositories.locker_repository import LockerRepository
from lockerkeep.core.repositories.transaction import TransactionManager
from lockerkeep.core.use_cases.assign_contract import require_id

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class KeyActionResult:
    log: KeyLog
    ended_contract_id: str | None


class RecordKeyActionUseCase:
    """
    Append a key hand-off to the log.

    A RETURNED action is the authoritative "locker is free" signal: in the same transaction the active
    contract (if any) is ended and the locker becomes AVAILABLE. TAKEN only appends to the log.
    """

    def __init__(
            self,
            *,
            locker_repo: LockerRepository,
            employee_repo: EmployeeRepository,
            contract_repo: ContractRepository,
            key_repo: LockerKeyRepository,
            key_log_repo: KeyLogRepository,
            tx: TransactionManager,
            clock: Clock,
    ) -> None:
        self._locker_repo = locker_repo
        self._employee_repo = employee_repo
        self._contract_repo = contract_repo
        self._key_repo = key_repo
        self._key_log_repo = key_log_repo
        self._tx = tx
        self._clock = clock

    @staticmethod
    def _parse_enum(enum_cls, value, name: str):
        try:
            return enum_cls(value)
        except ValueError:
            allowed = ", ".join(m.value for m in enum_cls)
            raise ValidationError(f"{name} must be one of: {allowed}") from None

    def execute(
            self,
            *,
            locker_id: str,
            employee_id: str,
            action: KeyAction | str,
            method: KeyMethod | str,
            locker_key_id: str | None = None,
    ) -> KeyActionResult:
        locker_id = require_id(locker_id, "locker_id")
        employee_id = require_id(employee_id, "employee_id")
        action = self._parse_enum(KeyAction, action, "action")
        method = self._parse_enum(KeyMethod, method, "method")

        locker = self._locker_repo.get(locker_id)
        if locker is None:
            raise NotFoundError(f"Locker {locker_id!r} not found")
        if self._employee_repo.get(employee_id) is None:
            raise NotFoundError(f"Employee {employee_id!r} not found")
        if locker_key_id:
            key = self._key_repo.get(locker_key_id)
            if key is None or key.locker_id != locker_id:
                raise NotFoundError(f"Key {locker_key_id!r} not found on locker {locker.locker_number!r}")

        ended_contract_id = None
        with self._tx.atomic():
            log = self._key_log_repo.append(
                KeyLog(
                    locker_id=locker_id,
                    locker_key_id=locker_key_id or None,
                    employee_id=employee_id,
                    action=action,
                    method=method,
                    timestamp=self._clock.now(),
                )
            )

            if action is KeyAction.RETURNED:
                active = self._contract_repo.get_active(locker_id)
                if active is not None:
                    self._contract_repo.deactivate_active(locker_id)
                    ended_contract_id = active.id
                locker.release()
                self._locker_repo.set_status(locker_id, locker.status)

        logger.info(
            "key_action_recorded",
            locker_number=locker.locker_number,
            employee_id=employee_id,
            action=action.value,
            method=method.value,
            ended_contract_id=ended_contract_id,
        )
        return KeyActionResult(log=log, ended_contract_id=ended_contract_id)


class HasKeyQuery:
    """
    Whether the employee currently holds the locker key, derived from the latest log entry of the pair.
    """

    def __init__(self, *, key_log_repo: KeyLogRepository) -> None:
        self._key_log_repo = key_log_repo

    def execute(self, *, locker_id: str, employee_id: str) -> bool:
        latest = self._key_log_repo.latest(locker_id=locker_id, employee_id=employee_id)
        return latest is not None and latest.action is KeyAction.TAKEN


class ListKeyLogsUseCase:
    def __init__(self, *, key_log_repo: KeyLogRepository) -> None:
        self._key_log_repo = key_log_repo

    def execute(
            self,
            *,
            locker_id: str | None = None,
            employee_id: str | None = None,
            limit: int = 50,
    ) -> list[KeyLog]:
        if limit < 1:
            raise ValidationError("limit must be positive")
        return self._key_log_repo.list(locker_id=locker_id, employee_id=employee_id, limit=limit)
