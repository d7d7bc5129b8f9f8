from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lockerkeep.core.errors import PersistenceError


class SqlTransactionManager:
    """
    Session-backed implementation of `lockerkeep.core.repositories.transaction.TransactionManager`.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    @contextmanager
    def atomic(self) -> Iterator[None]:
        try:
            yield
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            raise PersistenceError(str(getattr(e, "orig", None) or e)) from e
        except Exception:
            self._db.rollback()
            raise
