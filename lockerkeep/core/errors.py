from __future__ import annotations


class LockerKeepError(Exception):
    """Base for every error the core reports to its callers."""


class ValidationError(LockerKeepError):
    """Malformed or missing input. Raise to map to HTTP 422."""


class NotFoundError(LockerKeepError):
    """Referenced locker/employee/contract/key does not exist. Raise to map to HTTP 404."""


class ConflictError(LockerKeepError):
    """Request clashes with current state (locker occupied, duplicate NIK, ...). Raise to map to HTTP 409."""


class PersistenceError(LockerKeepError):
    """The store rejected a write (uniqueness violation, failed transaction)."""
