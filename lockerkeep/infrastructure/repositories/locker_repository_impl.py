from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from lockerkeep.core.entities.locker import Locker, LockerStatus
from lockerkeep.core.repositories.locker_repository import LockerRepository
from lockerkeep.infrastructure.models.models import LockerModel


def locker_from_row(row: LockerModel) -> Locker:
    return Locker(
        id=row.id,
        locker_number=row.locker_number,
        room_id=row.room_id,
        status=LockerStatus(row.status),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class LockerRepositoryImpl(LockerRepository):
    """
    Simple SQLAlchemy implementation for Locker.

    Writes are flushed, never committed: the caller's TransactionManager owns the commit.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def get(self, locker_id: str) -> Locker | None:
        row = self._db.get(LockerModel, locker_id)
        if row is None:
            return None
        return locker_from_row(row)

    def get_by_number(self, locker_number: str) -> Locker | None:
        row = self._db.scalars(select(LockerModel).where(LockerModel.locker_number == locker_number)).first()
        if row is None:
            return None
        return locker_from_row(row)

    def list(self, *, room_id: str | None = None, status: LockerStatus | None = None) -> list[Locker]:
        stmt = select(LockerModel)
        if room_id:
            stmt = stmt.where(LockerModel.room_id == room_id)
        if status is not None:
            stmt = stmt.where(LockerModel.status == status)
        stmt = stmt.order_by(LockerModel.locker_number.asc())
        return [locker_from_row(row) for row in self._db.scalars(stmt)]

    def existing_numbers(self, room_id: str) -> set[str]:
        stmt = select(LockerModel.locker_number).where(LockerModel.room_id == room_id)
        return set(self._db.scalars(stmt))

    def add(self, locker: Locker) -> Locker:
        row = LockerModel(locker_number=locker.locker_number, room_id=locker.room_id, status=locker.status)
        self._db.add(row)
        self._db.flush()
        return locker_from_row(row)

    def set_status(self, locker_id: str, status: LockerStatus) -> None:
        row = self._db.get(LockerModel, locker_id)
        if row is None:
            raise LookupError(f"Locker {locker_id!r} vanished")
        row.status = status
        self._db.flush()

    def count_by_status(self) -> dict[LockerStatus, int]:
        stmt = select(LockerModel.status, func.count(LockerModel.id)).group_by(LockerModel.status)
        return {LockerStatus(status): int(count) for status, count in self._db.execute(stmt)}
