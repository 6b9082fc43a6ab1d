"""Ví dụ: nhập CSV qua service layer (không qua Flask).

Usage: python -m examples.example_usage participants.csv [participant|staff]
"""

import asyncio
import importlib
import sys
from pathlib import Path

from config import get_settings_module

from src.event_roster.event_roster.container import build_container
from src.event_roster.event_roster.core.enums import EntityKind


async def run(path: Path, kind: EntityKind) -> None:
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)
    service = container.import_services[kind]
    token = "cli"

    with path.open("rb") as fh:
        state = await service.upload(
            token,
            fh,
            filename=path.name,
            media_type="text/csv",
            total_bytes=path.stat().st_size,
        )
    print("Preview:", state.preview.as_dict())

    state = await service.confirm(token)
    print(state.summary.message(service.entity.label))


def main():
    path = Path(sys.argv[1])
    kind = EntityKind(sys.argv[2]) if len(sys.argv) > 2 else EntityKind.PARTICIPANT
    asyncio.run(run(path, kind))


if __name__ == "__main__":
    main()
