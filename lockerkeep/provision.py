"""
Lay out lockers and keys for every room in the facility file.

    lockerkeep-provision [--rooms path/to/rooms.yaml]

Safe to re-run: existing locker numbers are skipped.
"""
import argparse
from pathlib import Path

import structlog

from lockerkeep.infrastructure.config import settings
from lockerkeep.infrastructure.database import Base, SessionLocal, engine
from lockerkeep.infrastructure.logging_config import configure_logging
from lockerkeep.infrastructure.rooms import load_room_configs
from lockerkeep.services.lockerkeep_service import provision_lockers_service

logger = structlog.get_logger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="lockerkeep-provision", description=__doc__.splitlines()[1])
    parser.add_argument("--rooms", type=Path, default=settings.rooms_path, help="facility layout YAML")
    args = parser.parse_args(argv)

    configure_logging(settings.log_level, settings.json_logs)
    Base.metadata.create_all(bind=engine)

    rooms = load_room_configs(args.rooms)
    db = SessionLocal()
    try:
        result = provision_lockers_service(rooms, db)
    finally:
        db.close()

    for room in rooms:
        logger.info("room_configured", room_id=room.room_id, name=room.name, count=room.count)
    logger.info("provisioning_done", lockers_created=result.lockers_created, keys_created=result.keys_created)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
