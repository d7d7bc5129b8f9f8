from __future__ import annotations

from abc import ABC, abstractmethod

from lockerkeep.core.entities.locker import Locker, LockerStatus


class LockerRepository(ABC):
    @abstractmethod
    def get(self, locker_id: str) -> Locker | None:
        raise NotImplementedError

    @abstractmethod
    def get_by_number(self, locker_number: str) -> Locker | None:
        raise NotImplementedError

    @abstractmethod
    def list(self, *, room_id: str | None = None, status: LockerStatus | None = None) -> list[Locker]:
        """Ordered by locker number."""
        raise NotImplementedError

    @abstractmethod
    def existing_numbers(self, room_id: str) -> set[str]:
        raise NotImplementedError

    @abstractmethod
    def add(self, locker: Locker) -> Locker:
        raise NotImplementedError

    @abstractmethod
    def set_status(self, locker_id: str, status: LockerStatus) -> None:
        raise NotImplementedError

    @abstractmethod
    def count_by_status(self) -> dict[LockerStatus, int]:
        raise NotImplementedError
