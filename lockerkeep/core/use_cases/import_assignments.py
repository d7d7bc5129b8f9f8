"""
Bulk locker assignment from tabular rows (CSV or JSON).

Rows are processed in order and independently. Each accepted row commits its own transaction; a rejected
row leaves no trace and never rolls back earlier rows. The outcome of every row is collected into an
`AssignmentImportResult` instead of being raised.
"""
from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any

import structlog

from lockerkeep.core.clock import Clock
from lockerkeep.core.entities.contract import Contract
from lockerkeep.core.entities.employee import Employee
from lockerkeep.core.entities.key_log import KeyAction, KeyLog, KeyMethod
from lockerkeep.core.entities.locker import Locker, LockerStatus
from lockerkeep.core.errors import ValidationError
from lockerkeep.core.repositories.contract_repository import ContractRepository
from lockerkeep.core.repositories.employee_repository import EmployeeRepository
from lockerkeep.core.repositories.key_log_repository import KeyLogRepository
from lockerkeep.core.repositories.locker_key_repository import LockerKeyRepository
from lockerkeep.core.repositories.locker_repository import LockerRepository
from lockerkeep.core.repositories.transaction import TransactionManager

logger = structlog.get_logger(__name__)

ASSIGNMENT_HEADERS = ("locker_number", "employee_nik", "start_date", "end_date", "notes")
REQUIRED_ASSIGNMENT_HEADERS = ("locker_number", "employee_nik", "start_date")

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# data rows start below the header line and are numbered from 1
FIRST_DATA_ROW = 2


@dataclass(frozen=True, slots=True)
class AssignmentRow:
    locker_number: str
    employee_nik: str
    start_date: date
    end_date: date | None = None
    notes: str | None = None


@dataclass(frozen=True, slots=True)
class ImportRowError:
    row: int
    locker_number: str | None
    employee_nik: str | None
    error: str


@dataclass(slots=True)
class AssignmentImportResult:
    imported: int = 0
    failed: int = 0
    errors: list[ImportRowError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.failed == 0

    def record(self, row_number: int, raw: Mapping[str, Any], error: str | None) -> None:
        if error is None:
            self.imported += 1
            return
        self.failed += 1
        self.errors.append(
            ImportRowError(
                row=row_number,
                locker_number=_text(raw.get("locker_number")) or None,
                employee_nik=_text(raw.get("employee_nik")) or None,
                error=error,
            )
        )


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _parse_date(value: str, name: str) -> date:
    if not _DATE_RE.match(value):
        raise ValidationError(f"{name} must be in YYYY-MM-DD format")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"{name} is not a valid date") from None


def validate_assignment_row(raw: Mapping[str, Any]) -> AssignmentRow:
    """
    Input-only checks, independent of stored state. Raises ValidationError on the first problem found.
    """
    for name in REQUIRED_ASSIGNMENT_HEADERS:
        if not _text(raw.get(name)):
            raise ValidationError(f"{name} is required")

    start_date = _parse_date(_text(raw.get("start_date")), "start_date")

    end_date = None
    end_text = _text(raw.get("end_date"))
    if end_text:
        end_date = _parse_date(end_text, "end_date")
        if start_date >= end_date:
            raise ValidationError("start_date must be before end_date")

    return AssignmentRow(
        locker_number=_text(raw.get("locker_number")),
        employee_nik=_text(raw.get("employee_nik")),
        start_date=start_date,
        end_date=end_date,
        notes=_text(raw.get("notes")) or None,
    )


class ImportAssignmentBatchUseCase:
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

    def execute(self, rows: Iterable[Mapping[str, Any]]) -> AssignmentImportResult:
        result = AssignmentImportResult()
        for index, raw in enumerate(rows):
            row_number = index + FIRST_DATA_ROW
            error = self._import_row(raw)
            if error is not None:
                logger.warning("assignment_row_failed", row=row_number, error=error)
            result.record(row_number, raw, error)

        logger.info("assignment_import_finished", imported=result.imported, failed=result.failed)
        return result

    def _import_row(self, raw: Mapping[str, Any]) -> str | None:
        """Returns the error message of a rejected row, None when the row was applied."""
        try:
            row = validate_assignment_row(raw)
        except ValidationError as e:
            return str(e)

        locker = self._locker_repo.get_by_number(row.locker_number)
        if locker is None:
            return f"Locker '{row.locker_number}' not found"
        if locker.status is not LockerStatus.AVAILABLE:
            return f"Locker is {locker.status.value}, not AVAILABLE"
        if self._contract_repo.get_active(locker.id) is not None:
            return "Locker already has an active contract"

        employee = self._employee_repo.get_by_nik(row.employee_nik)
        if employee is None:
            return f"Employee with NIK '{row.employee_nik}' not found"

        try:
            self._apply(row, locker, employee)
        except Exception as e:
            # the row transaction is already rolled back; the batch goes on
            logger.exception("assignment_row_apply_failed", locker_number=row.locker_number, nik=row.employee_nik)
            return str(e) or type(e).__name__
        return None

    def _apply(self, row: AssignmentRow, locker: Locker, employee: Employee) -> None:
        with self._tx.atomic():
            self._contract_repo.add(
                Contract(
                    employee_id=employee.id,
                    locker_id=locker.id,
                    contract_seq=self._contract_repo.max_seq(locker.id) + 1,
                    start_date=row.start_date,
                    end_date=row.end_date,
                    is_active=True,
                )
            )
            self._locker_repo.set_status(locker.id, LockerStatus.FILLED)

            keys = self._key_repo.list_for_locker(locker.id)
            if keys:
                self._key_repo.hand_available_keys_to(locker.id, employee.id)
                self._key_log_repo.append(
                    KeyLog(
                        locker_id=locker.id,
                        locker_key_id=keys[0].id,
                        employee_id=employee.id,
                        action=KeyAction.TAKEN,
                        method=KeyMethod.MANUAL,
                        timestamp=self._clock.now(),
                    )
                )
