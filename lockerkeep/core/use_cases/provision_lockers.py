from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from lockerkeep.core.entities.locker import Locker, RoomConfig, locker_number_for, physical_key_number_for
from lockerkeep.core.entities.locker_key import KeyStatus, LockerKey
from lockerkeep.core.repositories.locker_key_repository import LockerKeyRepository
from lockerkeep.core.repositories.locker_repository import LockerRepository
from lockerkeep.core.repositories.transaction import TransactionManager

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ProvisionResult:
    lockers_created: int
    keys_created: int


class ProvisionLockersUseCase:
    """
    Create the lockers of every room that do not exist yet, each with its employee key and HRGA backup.

    Safe to run repeatedly: existing locker numbers are skipped.
    """

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

    def execute(self, rooms: Sequence[RoomConfig]) -> ProvisionResult:
        lockers_created = keys_created = 0

        with self._tx.atomic():
            for room in rooms:
                existing = self._locker_repo.existing_numbers(room.room_id)
                for seq in range(1, room.count + 1):
                    number = locker_number_for(room.room_id, seq)
                    if number in existing:
                        continue

                    locker = self._locker_repo.add(Locker(locker_number=number, room_id=room.room_id))
                    self._key_repo.add(
                        LockerKey(
                            locker_id=locker.id,
                            key_number=1,
                            physical_key_number=physical_key_number_for(number),
                            label="Employee Key",
                            status=KeyStatus.AVAILABLE,
                        )
                    )
                    # duplicate key kept by HRGA, no engraved number
                    self._key_repo.add(
                        LockerKey(
                            locker_id=locker.id,
                            key_number=2,
                            label="HRGA Backup",
                            status=KeyStatus.WITH_HRGA,
                        )
                    )
                    lockers_created += 1
                    keys_created += 2

        logger.info("lockers_provisioned", lockers_created=lockers_created, keys_created=keys_created)
        return ProvisionResult(lockers_created=lockers_created, keys_created=keys_created)
