from __future__ import annotations

import logging

import mysql.connector

from ..core.enums import EntityKind
from ..core.exceptions import StoreLookupError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from ..importing.entity import get_entity
from .repository import SettingsRepository

logger = logging.getLogger(__name__)


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_default_status(self, entity_kind: EntityKind) -> str:
        entity = get_entity(entity_kind)
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "SELECT setting_value FROM system_settings WHERE setting_key=%s",
                    (entity.status_setting_key,),
                )
                rows = fetchall(cur)
        except mysql.connector.Error as exc:
            logger.error("Could not read %s: %s", entity.status_setting_key, exc)
            raise StoreLookupError(f"Could not load the default status for new {entity.label}.") from exc
        value = (rows[0]["setting_value"] if rows else "") or ""
        if not value.strip():
            logger.info("No %s configured, using %r", entity.status_setting_key, entity.fallback_status)
            return entity.fallback_status
        return value.strip()
