from __future__ import annotations

from abc import ABC, abstractmethod

from lockerkeep.core.entities.employee import Employee


class EmployeeRepository(ABC):
    @abstractmethod
    def get(self, employee_id: str) -> Employee | None:
        raise NotImplementedError

    @abstractmethod
    def get_by_nik(self, nik: str) -> Employee | None:
        raise NotImplementedError

    @abstractmethod
    def list(self, *, search: str | None = None, active_only: bool = False) -> list[Employee]:
        """Ordered by name. `search` matches name, NIK or department, case-insensitively."""
        raise NotImplementedError

    @abstractmethod
    def add(self, employee: Employee) -> Employee:
        """Insert and return the stored employee (with id and timestamps)."""
        raise NotImplementedError

    @abstractmethod
    def update(self, employee: Employee) -> Employee:
        raise NotImplementedError

    @abstractmethod
    def delete(self, employee_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def is_referenced(self, employee_id: str) -> bool:
        """True if any contract, key log or held key points at the employee."""
        raise NotImplementedError
