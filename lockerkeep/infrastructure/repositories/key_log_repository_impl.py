from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from lockerkeep.core.entities.key_log import KeyAction, KeyLog, KeyMethod
from lockerkeep.core.repositories.key_log_repository import KeyLogRepository
from lockerkeep.infrastructure.models.models import KeyLogModel


def key_log_from_row(row: KeyLogModel) -> KeyLog:
    return KeyLog(
        id=row.id,
        locker_id=row.locker_id,
        locker_key_id=row.locker_key_id,
        employee_id=row.employee_id,
        action=KeyAction(row.action),
        method=KeyMethod(row.method),
        timestamp=row.timestamp,
    )


class KeyLogRepositoryImpl(KeyLogRepository):
    """
    Append-only: there is deliberately no update or delete.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def append(self, log: KeyLog) -> KeyLog:
        row = KeyLogModel(
            locker_id=log.locker_id,
            locker_key_id=log.locker_key_id,
            employee_id=log.employee_id,
            action=log.action,
            method=log.method,
            timestamp=log.timestamp,
            seq=self._next_seq(),
        )
        self._db.add(row)
        self._db.flush()
        return key_log_from_row(row)

    def _next_seq(self) -> int:
        return int(self._db.scalar(select(func.max(KeyLogModel.seq))) or 0) + 1

    def latest(self, *, locker_id: str, employee_id: str) -> KeyLog | None:
        stmt = (
            select(KeyLogModel)
            .where(KeyLogModel.locker_id == locker_id)
            .where(KeyLogModel.employee_id == employee_id)
            .order_by(KeyLogModel.timestamp.desc(), KeyLogModel.seq.desc())
        )
        row = self._db.scalars(stmt).first()
        if row is None:
            return None
        return key_log_from_row(row)

    def list(
        self,
        *,
        locker_id: str | None = None,
        employee_id: str | None = None,
        locker_key_id: str | None = None,
        limit: int = 50,
    ) -> list[KeyLog]:
        stmt = select(KeyLogModel)
        if locker_id:
            stmt = stmt.where(KeyLogModel.locker_id == locker_id)
        if employee_id:
            stmt = stmt.where(KeyLogModel.employee_id == employee_id)
        if locker_key_id:
            stmt = stmt.where(KeyLogModel.locker_key_id == locker_key_id)
        stmt = stmt.order_by(KeyLogModel.timestamp.desc(), KeyLogModel.seq.desc()).limit(limit)
        return [key_log_from_row(row) for row in self._db.scalars(stmt)]
