from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

import structlog

from lockerkeep.core.entities.key_log import KeyLog
from lockerkeep.core.entities.locker_key import KeyStatus, LockerKey
from lockerkeep.core.errors import NotFoundError, ValidationError
from lockerkeep.core.repositories.employee_repository import EmployeeRepository
from lockerkeep.core.repositories.key_log_repository import KeyLogRepository
from lockerkeep.core.repositories.locker_key_repository import LockerKeyRepository
from lockerkeep.core.repositories.locker_repository import LockerRepository
from lockerkeep.core.repositories.transaction import TransactionManager

logger = structlog.get_logger(__name__)

RECENT_KEY_LOGS = 10


@dataclass(frozen=True, slots=True)
class KeyDetailDTO:
    key: LockerKey
    recent_logs: list[KeyLog]


def _parse_status(value: Any) -> KeyStatus:
    try:
        return KeyStatus(value)
    except ValueError:
        raise ValidationError(f"status must be one of: {', '.join(s.value for s in KeyStatus)}") from None


class ListKeysUseCase:
    def __init__(self, *, key_repo: LockerKeyRepository) -> None:
        self._key_repo = key_repo

    def execute(
            self,
            *,
            locker_id: str | None = None,
            status: KeyStatus | None = None,
            holder_id: str | None = None,
            room_id: str | None = None,
    ) -> list[LockerKey]:
        return self._key_repo.list(locker_id=locker_id, status=status, holder_id=holder_id, room_id=room_id)


class GetKeyUseCase:
    def __init__(self, *, key_repo: LockerKeyRepository, key_log_repo: KeyLogRepository) -> None:
        self._key_repo = key_repo
        self._key_log_repo = key_log_repo

    def execute(self, *, key_id: str) -> KeyDetailDTO:
        key = self._key_repo.get(key_id)
        if key is None:
            raise NotFoundError("Key not found")
        logs = self._key_log_repo.list(locker_key_id=key_id, limit=RECENT_KEY_LOGS)
        return KeyDetailDTO(key=key, recent_logs=logs)


class CreateKeyUseCase:
    """Adds a key to a locker with the next free key number."""

    def __init__(
            self,
            *,
            locker_repo: LockerRepository,
            key_repo: LockerKeyRepository,
            tx: TransactionManager,
    ) -> None:
        self._locker_repo = locker_repo
        self._key_repo = key_repo
        self._tx = tx

    def execute(
            self,
            *,
            locker_id: str,
            label: str | None = None,
            status: KeyStatus | str | None = None,
            physical_key_number: str | None = None,
    ) -> LockerKey:
        if not locker_id:
            raise ValidationError("locker_id is required")
        if self._locker_repo.get(locker_id) is None:
            raise NotFoundError(f"Locker {locker_id!r} not found")

        key_status = KeyStatus.AVAILABLE if status is None else _parse_status(status)
        if key_status is KeyStatus.WITH_EMPLOYEE:
            raise ValidationError("A new key cannot be WITH_EMPLOYEE without a holder")

        with self._tx.atomic():
            key = self._key_repo.add(
                LockerKey(
                    locker_id=locker_id,
                    key_number=self._key_repo.max_key_number(locker_id) + 1,
                    physical_key_number=physical_key_number or None,
                    label=label or None,
                    status=key_status,
                )
            )
        logger.info("key_created", locker_id=locker_id, key_number=key.key_number)
        return key


class UpdateKeyUseCase:
    """
    Direct operator edit of a key (PATCH semantics). Not synchronised with the key log.
    """

    def __init__(
            self,
            *,
            key_repo: LockerKeyRepository,
            employee_repo: EmployeeRepository,
            tx: TransactionManager,
    ) -> None:
        self._key_repo = key_repo
        self._employee_repo = employee_repo
        self._tx = tx

    def execute(self, *, key_id: str, changes: dict[str, Any]) -> LockerKey:
        key = self._key_repo.get(key_id)
        if key is None:
            raise NotFoundError("Key not found")

        updates: dict[str, Any] = {}
        if "status" in changes:
            updates["status"] = _parse_status(changes["status"])
        if "holder_id" in changes:
            holder_id = changes["holder_id"] or None
            if holder_id is not None and self._employee_repo.get(holder_id) is None:
                raise NotFoundError(f"Employee {holder_id!r} not found")
            updates["holder_id"] = holder_id
        if "label" in changes:
            updates["label"] = changes["label"] or None
        if "physical_key_number" in changes:
            updates["physical_key_number"] = changes["physical_key_number"] or None

        updated = replace(key, **updates)
        try:
            updated.check_holder()
        except ValueError as e:
            raise ValidationError(str(e)) from e

        with self._tx.atomic():
            return self._key_repo.update(updated)


class DeleteKeyUseCase:
    def __init__(self, *, key_repo: LockerKeyRepository, tx: TransactionManager) -> None:
        self._key_repo = key_repo
        self._tx = tx

    def execute(self, *, key_id: str) -> None:
        key = self._key_repo.get(key_id)
        if key is None:
            raise NotFoundError("Key not found")
        with self._tx.atomic():
            self._key_repo.delete(key_id)
        logger.info("key_deleted", locker_id=key.locker_id, key_number=key.key_number)
