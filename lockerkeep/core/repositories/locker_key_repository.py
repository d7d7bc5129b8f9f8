from __future__ import annotations

from abc import ABC, abstractmethod

from lockerkeep.core.entities.locker_key import KeyStatus, LockerKey


class LockerKeyRepository(ABC):
    @abstractmethod
    def get(self, key_id: str) -> LockerKey | None:
        raise NotImplementedError

    @abstractmethod
    def list_for_locker(self, locker_id: str) -> list[LockerKey]:
        """Ordered by key number."""
        raise NotImplementedError

    @abstractmethod
    def list(
        self,
        *,
        locker_id: str | None = None,
        status: KeyStatus | None = None,
        holder_id: str | None = None,
        room_id: str | None = None,
    ) -> list[LockerKey]:
        """Ordered by locker number, then key number."""
        raise NotImplementedError

    @abstractmethod
    def max_key_number(self, locker_id: str) -> int:
        """0 when the locker has no keys."""
        raise NotImplementedError

    @abstractmethod
    def add(self, key: LockerKey) -> LockerKey:
        raise NotImplementedError

    @abstractmethod
    def update(self, key: LockerKey) -> LockerKey:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def hand_available_keys_to(self, locker_id: str, employee_id: str) -> int:
        """Set every AVAILABLE key of the locker to WITH_EMPLOYEE held by the employee. Returns rows changed."""
        raise NotImplementedError
