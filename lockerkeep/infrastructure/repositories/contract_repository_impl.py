from __future__ import annotations

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from lockerkeep.core.entities.contract import Contract
from lockerkeep.core.repositories.contract_repository import ContractRepository
from lockerkeep.infrastructure.models.models import ContractModel


def contract_from_row(row: ContractModel) -> Contract:
    return Contract(
        id=row.id,
        employee_id=row.employee_id,
        locker_id=row.locker_id,
        contract_seq=row.contract_seq,
        start_date=row.start_date,
        end_date=row.end_date,
        is_active=row.is_active,
        created_at=row.created_at,
    )


class ContractRepositoryImpl(ContractRepository):
    def __init__(self, db: Session) -> None:
        self._db = db

    def get_active(self, locker_id: str) -> Contract | None:
        stmt = (
            select(ContractModel)
            .where(ContractModel.locker_id == locker_id)
            .where(ContractModel.is_active.is_(True))
            .order_by(ContractModel.contract_seq.desc())
        )
        row = self._db.scalars(stmt).first()
        if row is None:
            return None
        return contract_from_row(row)

    def get_active_for_employee(self, employee_id: str) -> Contract | None:
        stmt = (
            select(ContractModel)
            .where(ContractModel.employee_id == employee_id)
            .where(ContractModel.is_active.is_(True))
            .order_by(ContractModel.contract_seq.desc())
        )
        row = self._db.scalars(stmt).first()
        if row is None:
            return None
        return contract_from_row(row)

    def max_seq(self, locker_id: str) -> int:
        stmt = select(func.max(ContractModel.contract_seq)).where(ContractModel.locker_id == locker_id)
        return int(self._db.scalar(stmt) or 0)

    def add(self, contract: Contract) -> Contract:
        row = ContractModel(
            employee_id=contract.employee_id,
            locker_id=contract.locker_id,
            contract_seq=contract.contract_seq,
            start_date=contract.start_date,
            end_date=contract.end_date,
            is_active=contract.is_active,
        )
        self._db.add(row)
        self._db.flush()
        return contract_from_row(row)

    def deactivate_active(self, locker_id: str) -> int:
        stmt = (
            update(ContractModel)
            .where(ContractModel.locker_id == locker_id)
            .where(ContractModel.is_active.is_(True))
            .values(is_active=False)
            .execution_options(synchronize_session="fetch")
        )
        return self._db.execute(stmt).rowcount

    def list(self, *, locker_id: str | None = None, employee_id: str | None = None) -> list[Contract]:
        stmt = select(ContractModel)
        if locker_id:
            stmt = stmt.where(ContractModel.locker_id == locker_id)
        if employee_id:
            stmt = stmt.where(ContractModel.employee_id == employee_id)
        stmt = stmt.order_by(ContractModel.created_at.desc(), ContractModel.contract_seq.desc())
        return [contract_from_row(row) for row in self._db.scalars(stmt)]

    def list_active(self) -> list[Contract]:
        stmt = select(ContractModel).where(ContractModel.is_active.is_(True))
        return [contract_from_row(row) for row in self._db.scalars(stmt)]

    def list_active_with_end_date(self, *, locker_id: str | None = None) -> list[Contract]:
        stmt = (
            select(ContractModel)
            .where(ContractModel.is_active.is_(True))
            .where(ContractModel.end_date.is_not(None))
        )
        if locker_id:
            stmt = stmt.where(ContractModel.locker_id == locker_id)
        stmt = stmt.order_by(ContractModel.end_date.asc(), ContractModel.contract_seq.asc())
        return [contract_from_row(row) for row in self._db.scalars(stmt)]
