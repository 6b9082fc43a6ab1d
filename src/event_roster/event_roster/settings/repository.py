from __future__ import annotations

from typing import Protocol

from ..core.enums import EntityKind


class SettingsRepository(Protocol):
    def get_default_status(self, entity_kind: EntityKind) -> str:
        raise NotImplementedError
