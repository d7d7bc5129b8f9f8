from __future__ import annotations

from pathlib import Path

import yaml

from lockerkeep.core.entities.locker import RoomConfig


def load_room_configs(path: Path) -> list[RoomConfig]:
    with Path(path).open("r", encoding="utf-8") as f:
        doc = yaml.safe_load(f) or {}

    rooms = doc.get("rooms")
    if not isinstance(rooms, list):
        raise ValueError(f"{path}: expected a top-level 'rooms' list")

    configs: list[RoomConfig] = []
    for entry in rooms:
        configs.append(
            RoomConfig(
                room_id=str(entry["room_id"]),
                name=str(entry.get("name") or entry["room_id"]),
                count=int(entry["count"]),
                columns=int(entry.get("columns", 10)),
            )
        )
    return configs
