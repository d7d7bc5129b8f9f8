import structlog
from fastapi import FastAPI

from lockerkeep.infrastructure.config import settings
from lockerkeep.infrastructure.database import Base, SessionLocal, engine
from lockerkeep.infrastructure.logging_config import configure_logging
from lockerkeep.infrastructure.rooms import load_room_configs
from lockerkeep.presentation import employee_routers, import_routers, routers
from lockerkeep.presentation.error_handlers import register_error_handlers
from lockerkeep.services.lockerkeep_service import provision_lockers_service

configure_logging(settings.log_level, settings.json_logs)
logger = structlog.get_logger(__name__)

app = FastAPI(title="LockerKeep", description="Employee locker, key and contract management")


@app.on_event("startup")
def _provision_on_startup() -> None:
    """
    With an in-memory database every start is a fresh facility; optionally lay out the configured rooms
    """
    if not settings.provision_on_startup:
        return
    db = SessionLocal()
    try:
        result = provision_lockers_service(load_room_configs(settings.rooms_path), db)
        logger.info("startup_provisioned", lockers=result.lockers_created, keys=result.keys_created)
    finally:
        db.close()


@app.on_event("shutdown")
def _dispose_engine() -> None:
    engine.dispose()


Base.metadata.create_all(bind=engine)
app.include_router(routers.router)
app.include_router(employee_routers.router)
app.include_router(import_routers.router)
register_error_handlers(app)
