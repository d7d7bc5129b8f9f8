from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol


class TransactionManager(Protocol):
    """
    Groups repository writes into one all-or-nothing unit.

    Leaving `atomic()` normally commits; any exception rolls every write back. Store failures surface as
    `PersistenceError`.
    """

    def atomic(self) -> AbstractContextManager[None]:
        raise NotImplementedError
