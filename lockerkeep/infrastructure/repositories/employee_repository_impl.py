from __future__ import annotations

from sqlalchemy import exists, func, or_, select
from sqlalchemy.orm import Session

from lockerkeep.core.entities.employee import Employee
from lockerkeep.core.repositories.employee_repository import EmployeeRepository
from lockerkeep.infrastructure.models.models import ContractModel, EmployeeModel, KeyLogModel, LockerKeyModel


def employee_from_row(row: EmployeeModel) -> Employee:
    return Employee(
        id=row.id,
        nik=row.nik,
        name=row.name,
        department=row.department,
        is_active=row.is_active,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class EmployeeRepositoryImpl(EmployeeRepository):
    def __init__(self, db: Session) -> None:
        self._db = db

    def get(self, employee_id: str) -> Employee | None:
        row = self._db.get(EmployeeModel, employee_id)
        if row is None:
            return None
        return employee_from_row(row)

    def get_by_nik(self, nik: str) -> Employee | None:
        row = self._db.scalars(select(EmployeeModel).where(EmployeeModel.nik == nik)).first()
        if row is None:
            return None
        return employee_from_row(row)

    def list(self, *, search: str | None = None, active_only: bool = False) -> list[Employee]:
        stmt = select(EmployeeModel)
        if active_only:
            stmt = stmt.where(EmployeeModel.is_active.is_(True))
        if search:
            term = f"%{search.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(EmployeeModel.name).like(term),
                    func.lower(EmployeeModel.nik).like(term),
                    func.lower(EmployeeModel.department).like(term),
                )
            )
        stmt = stmt.order_by(EmployeeModel.name.asc())
        return [employee_from_row(row) for row in self._db.scalars(stmt)]

    def add(self, employee: Employee) -> Employee:
        row = EmployeeModel(
            nik=employee.nik,
            name=employee.name,
            department=employee.department,
            is_active=employee.is_active,
        )
        self._db.add(row)
        self._db.flush()
        return employee_from_row(row)

    def update(self, employee: Employee) -> Employee:
        row = self._db.get(EmployeeModel, employee.id)
        if row is None:
            raise LookupError(f"Employee {employee.id!r} vanished")

        row.nik = employee.nik
        row.name = employee.name
        row.department = employee.department
        row.is_active = employee.is_active

        self._db.flush()
        return employee_from_row(row)

    def delete(self, employee_id: str) -> None:
        row = self._db.get(EmployeeModel, employee_id)
        if row is not None:
            self._db.delete(row)
            self._db.flush()

    def is_referenced(self, employee_id: str) -> bool:
        stmt = select(
            or_(
                exists().where(ContractModel.employee_id == employee_id),
                exists().where(KeyLogModel.employee_id == employee_id),
                exists().where(LockerKeyModel.holder_id == employee_id),
            )
        )
        return bool(self._db.scalar(stmt))
