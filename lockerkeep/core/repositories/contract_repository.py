from __future__ import annotations

from abc import ABC, abstractmethod

from lockerkeep.core.entities.contract import Contract


class ContractRepository(ABC):
    @abstractmethod
    def get_active(self, locker_id: str) -> Contract | None:
        raise NotImplementedError

    @abstractmethod
    def get_active_for_employee(self, employee_id: str) -> Contract | None:
        """Highest contract_seq among the employee's active contracts."""
        raise NotImplementedError

    @abstractmethod
    def max_seq(self, locker_id: str) -> int:
        """0 when the locker has no contract history."""
        raise NotImplementedError

    @abstractmethod
    def add(self, contract: Contract) -> Contract:
        raise NotImplementedError

    @abstractmethod
    def deactivate_active(self, locker_id: str) -> int:
        """End every active contract of the locker. Returns how many were ended."""
        raise NotImplementedError

    @abstractmethod
    def list(self, *, locker_id: str | None = None, employee_id: str | None = None) -> list[Contract]:
        """Newest first."""
        raise NotImplementedError

    @abstractmethod
    def list_active(self) -> list[Contract]:
        raise NotImplementedError

    @abstractmethod
    def list_active_with_end_date(self, *, locker_id: str | None = None) -> list[Contract]:
        """Active, non-permanent contracts ordered by end date ascending."""
        raise NotImplementedError
