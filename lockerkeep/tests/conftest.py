from __future__ import annotations

from collections.abc import Iterator

import pytest
from sqlalchemy.orm import Session
from starlette.testclient import TestClient

from lockerkeep.core.entities.locker import RoomConfig
from lockerkeep.infrastructure.database import Base, SessionLocal, engine
from lockerkeep.infrastructure.repositories.locker_repository_impl import LockerRepositoryImpl
from lockerkeep.main import app
from lockerkeep.presentation import routers
from lockerkeep.services.lockerkeep_service import provision_lockers_service
from lockerkeep.tests.helpers import TODAY, FixedClock


@pytest.fixture(autouse=True)
def _fresh_schema() -> Iterator[None]:
    """
    Every test starts from empty tables; the shared in-memory SQLite connection would leak rows otherwise.
    """
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(TODAY)


@pytest.fixture()
def db() -> Iterator[Session]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(clock: FixedClock) -> Iterator[TestClient]:
    def _override_get_db():
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[routers.get_db] = _override_get_db
    app.dependency_overrides[routers.get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def lockers(db: Session) -> dict[str, str]:
    """Three lockers L/M01/001..003 with their two keys each; maps locker number to id."""
    provision_lockers_service([RoomConfig(room_id="M01", name="Male 01", count=3)], db)
    return {locker.locker_number: locker.id for locker in LockerRepositoryImpl(db).list()}
