from __future__ import annotations

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from lockerkeep.core.entities.locker_key import KeyStatus, LockerKey
from lockerkeep.core.repositories.locker_key_repository import LockerKeyRepository
from lockerkeep.infrastructure.models.models import LockerKeyModel, LockerModel


def locker_key_from_row(row: LockerKeyModel) -> LockerKey:
    return LockerKey(
        id=row.id,
        locker_id=row.locker_id,
        key_number=row.key_number,
        physical_key_number=row.physical_key_number,
        label=row.label,
        status=KeyStatus(row.status),
        holder_id=row.holder_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class LockerKeyRepositoryImpl(LockerKeyRepository):
    def __init__(self, db: Session) -> None:
        self._db = db

    def get(self, key_id: str) -> LockerKey | None:
        row = self._db.get(LockerKeyModel, key_id)
        if row is None:
            return None
        return locker_key_from_row(row)

    def list_for_locker(self, locker_id: str) -> list[LockerKey]:
        stmt = (
            select(LockerKeyModel)
            .where(LockerKeyModel.locker_id == locker_id)
            .order_by(LockerKeyModel.key_number.asc())
        )
        return [locker_key_from_row(row) for row in self._db.scalars(stmt)]

    def list(
        self,
        *,
        locker_id: str | None = None,
        status: KeyStatus | None = None,
        holder_id: str | None = None,
        room_id: str | None = None,
    ) -> list[LockerKey]:
        stmt = select(LockerKeyModel).join(LockerModel, LockerKeyModel.locker_id == LockerModel.id)
        if locker_id:
            stmt = stmt.where(LockerKeyModel.locker_id == locker_id)
        if status is not None:
            stmt = stmt.where(LockerKeyModel.status == status)
        if holder_id:
            stmt = stmt.where(LockerKeyModel.holder_id == holder_id)
        if room_id:
            stmt = stmt.where(LockerModel.room_id == room_id)
        stmt = stmt.order_by(LockerModel.locker_number.asc(), LockerKeyModel.key_number.asc())
        return [locker_key_from_row(row) for row in self._db.scalars(stmt)]

    def max_key_number(self, locker_id: str) -> int:
        stmt = select(func.max(LockerKeyModel.key_number)).where(LockerKeyModel.locker_id == locker_id)
        return int(self._db.scalar(stmt) or 0)

    def add(self, key: LockerKey) -> LockerKey:
        row = LockerKeyModel(
            locker_id=key.locker_id,
            key_number=key.key_number,
            physical_key_number=key.physical_key_number,
            label=key.label,
            status=key.status,
            holder_id=key.holder_id,
        )
        self._db.add(row)
        self._db.flush()
        return locker_key_from_row(row)

    def update(self, key: LockerKey) -> LockerKey:
        row = self._db.get(LockerKeyModel, key.id)
        if row is None:
            raise LookupError(f"Key {key.id!r} vanished")

        row.physical_key_number = key.physical_key_number
        row.label = key.label
        row.status = key.status
        row.holder_id = key.holder_id

        self._db.flush()
        return locker_key_from_row(row)

    def delete(self, key_id: str) -> None:
        row = self._db.get(LockerKeyModel, key_id)
        if row is not None:
            self._db.delete(row)
            self._db.flush()

    def hand_available_keys_to(self, locker_id: str, employee_id: str) -> int:
        stmt = (
            update(LockerKeyModel)
            .where(LockerKeyModel.locker_id == locker_id)
            .where(LockerKeyModel.status == KeyStatus.AVAILABLE)
            .values(status=KeyStatus.WITH_EMPLOYEE, holder_id=employee_id)
            .execution_options(synchronize_session="fetch")
        )
        return self._db.execute(stmt).rowcount
