from __future__ import annotations

from datetime import date

import structlog

from lockerkeep.core.clock import Clock
from lockerkeep.core.entities.contract import Contract
from lockerkeep.core.errors import ConflictError, NotFoundError, ValidationError
from lockerkeep.core.repositories.contract_repository import ContractRepository
from lockerkeep.core.repositories.employee_repository import EmployeeRepository
from lockerkeep.core.repositories.locker_repository import LockerRepository
from lockerkeep.core.repositories.transaction import TransactionManager

logger = structlog.get_logger(__name__)


def require_id(value: object, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} must be a non-empty string")
    return value.strip()


class AssignContractUseCase:
    """
    Assign a locker to an employee, or renew the assignment.

    Any active contract of the locker is superseded unconditionally (also for the same employee), the new
    contract becomes the single active one, and the locker status is recomputed from its end date. Key
    custody is left untouched.
    """

    def __init__(
            self,
            *,
            locker_repo: LockerRepository,
            employee_repo: EmployeeRepository,
            contract_repo: ContractRepository,
            tx: TransactionManager,
            clock: Clock,
    ) -> None:
        self._locker_repo = locker_repo
        self._employee_repo = employee_repo
        self._contract_repo = contract_repo
        self._tx = tx
        self._clock = clock

    def execute(
            self,
            *,
            locker_id: str,
            employee_id: str,
            start_date: date,
            end_date: date | None = None,
            contract_seq: int | None = None,
    ) -> Contract:
        locker_id = require_id(locker_id, "locker_id")
        employee_id = require_id(employee_id, "employee_id")
        if start_date is None:
            raise ValidationError("start_date is required")
        if end_date is not None and start_date >= end_date:
            raise ValidationError("start_date must be before end_date")

        locker = self._locker_repo.get(locker_id)
        if locker is None:
            raise NotFoundError(f"Locker {locker_id!r} not found")
        if self._employee_repo.get(employee_id) is None:
            raise NotFoundError(f"Employee {employee_id!r} not found")

        with self._tx.atomic():
            next_seq = self._contract_repo.max_seq(locker_id) + 1
            if contract_seq is None:
                contract_seq = next_seq
            elif contract_seq < next_seq:
                raise ConflictError(
                    f"contract_seq {contract_seq} already used for locker {locker.locker_number!r} "
                    f"(next is {next_seq})"
                )

            superseded = self._contract_repo.deactivate_active(locker_id)
            contract = self._contract_repo.add(
                Contract(
                    employee_id=employee_id,
                    locker_id=locker_id,
                    contract_seq=contract_seq,
                    start_date=start_date,
                    end_date=end_date,
                    is_active=True,
                )
            )

            locker.occupy(end_date=end_date, today=self._clock.today())
            self._locker_repo.set_status(locker_id, locker.status)

        logger.info(
            "contract_assigned",
            locker_number=locker.locker_number,
            employee_id=employee_id,
            contract_seq=contract.contract_seq,
            superseded=superseded,
            locker_status=locker.status.value,
        )
        return contract
