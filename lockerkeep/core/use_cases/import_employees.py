from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

import structlog

from lockerkeep.core.entities.employee import Employee
from lockerkeep.core.repositories.employee_repository import EmployeeRepository
from lockerkeep.core.repositories.transaction import TransactionManager
from lockerkeep.core.use_cases.import_assignments import FIRST_DATA_ROW

logger = structlog.get_logger(__name__)

EMPLOYEE_HEADERS = ("nik", "name", "department", "isActive")
REQUIRED_EMPLOYEE_HEADERS = EMPLOYEE_HEADERS[:3]

_TRUE_WORDS = frozenset({"true", "1", "yes", "active"})
_FALSE_WORDS = frozenset({"false", "0", "no", "inactive"})


def parse_active_flag(value: Any) -> bool:
    """
    Tolerant boolean: true/1/yes/active, false/0/no/inactive (any case). Blank means active.
    """
    if value is None:
        return True
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if not text or text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise ValueError("isActive must be true/false, 1/0, yes/no, or active/inactive")


@dataclass(frozen=True, slots=True)
class ImportedEmployee:
    row: int
    nik: str
    name: str


@dataclass(frozen=True, slots=True)
class EmployeeRowError:
    row: int
    nik: str | None
    errors: list[str]


@dataclass(frozen=True, slots=True)
class DuplicateEmployee:
    row: int
    nik: str
    name: str | None
    message: str = "NIK already exists in database"


@dataclass(slots=True)
class EmployeeImportResult:
    total: int = 0
    imported_rows: list[ImportedEmployee] = field(default_factory=list)
    error_rows: list[EmployeeRowError] = field(default_factory=list)
    duplicate_rows: list[DuplicateEmployee] = field(default_factory=list)

    @property
    def imported(self) -> int:
        return len(self.imported_rows)

    @property
    def failed(self) -> int:
        return len(self.error_rows)

    @property
    def duplicates(self) -> int:
        return len(self.duplicate_rows)


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


class ImportEmployeeBatchUseCase:
    """
    Create employees from directory rows.

    Each row is checked against stored employees only. Rows commit one by one, so a NIK repeated later in
    the same batch is reported as a duplicate of the earlier row; a clash the check misses (a concurrent
    writer) surfaces from the store as an ordinary row error.
    """

    def __init__(self, *, employee_repo: EmployeeRepository, tx: TransactionManager) -> None:
        self._employee_repo = employee_repo
        self._tx = tx

    def execute(self, rows: Iterable[Mapping[str, Any]]) -> EmployeeImportResult:
        result = EmployeeImportResult()
        for index, raw in enumerate(rows):
            result.total += 1
            self._import_row(index + FIRST_DATA_ROW, raw, result)

        logger.info(
            "employee_import_finished",
            total=result.total,
            imported=result.imported,
            failed=result.failed,
            duplicates=result.duplicates,
        )
        return result

    def _import_row(self, row_number: int, raw: Mapping[str, Any], result: EmployeeImportResult) -> None:
        nik = _text(raw.get("nik"))
        name = _text(raw.get("name"))
        department = _text(raw.get("department"))

        errors: list[str] = []
        if not nik:
            errors.append("NIK is required")
        if not name:
            errors.append("Name is required")
        if not department:
            errors.append("Department is required")
        is_active = True
        try:
            is_active = parse_active_flag(raw.get("isActive"))
        except ValueError as e:
            errors.append(str(e))

        if errors:
            result.error_rows.append(EmployeeRowError(row=row_number, nik=nik or None, errors=errors))
            return

        if self._employee_repo.get_by_nik(nik) is not None:
            result.duplicate_rows.append(DuplicateEmployee(row=row_number, nik=nik, name=name))
            return

        try:
            with self._tx.atomic():
                created = self._employee_repo.add(
                    Employee(nik=nik, name=name, department=department, is_active=is_active)
                )
        except Exception as e:
            logger.exception("employee_row_failed", row=row_number, nik=nik)
            result.error_rows.append(
                EmployeeRowError(row=row_number, nik=nik, errors=[str(e) or "Failed to create employee"])
            )
            return

        result.imported_rows.append(ImportedEmployee(row=row_number, nik=created.nik, name=created.name))
