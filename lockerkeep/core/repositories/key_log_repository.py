from __future__ import annotations

from abc import ABC, abstractmethod

from lockerkeep.core.entities.key_log import KeyLog


class KeyLogRepository(ABC):
    @abstractmethod
    def append(self, log: KeyLog) -> KeyLog:
        raise NotImplementedError

    @abstractmethod
    def latest(self, *, locker_id: str, employee_id: str) -> KeyLog | None:
        """Most recent entry by timestamp for the locker/employee pair."""
        raise NotImplementedError

    @abstractmethod
    def list(
        self,
        *,
        locker_id: str | None = None,
        employee_id: str | None = None,
        locker_key_id: str | None = None,
        limit: int = 50,
    ) -> list[KeyLog]:
        """Newest first."""
        raise NotImplementedError
