from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from .core.constants import DEFAULT_CHUNK_SIZE, DEFAULT_MAX_UPLOAD_BYTES, DEFAULT_PREVIEW_ROWS
from .core.enums import EntityKind
from .database.connection import DBConfig, DatabaseConnection
from .importing.entity import ENTITIES
from .importing.service import ImportService, ImportSessionStore
from .records.mysql_record_repository import MySQLRecordRepository
from .records.repository import RecordRepository
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.repository import SettingsRepository
from .taxonomy.mysql_taxonomy_repository import MySQLTaxonomyRepository
from .taxonomy.repository import TaxonomyRepository


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    taxonomy_repo: TaxonomyRepository
    settings_repo: SettingsRepository
    record_repos: Mapping[EntityKind, RecordRepository]

    import_sessions: ImportSessionStore
    import_services: Mapping[EntityKind, ImportService]


def build_import_services(
    *,
    record_repos: Mapping[EntityKind, RecordRepository],
    taxonomy_repo: TaxonomyRepository,
    settings_repo: SettingsRepository,
    sessions: ImportSessionStore,
    import_config: Optional[dict] = None,
) -> dict[EntityKind, ImportService]:
    import_config = import_config or {}
    return {
        kind: ImportService(
            entity,
            record_repos[kind],
            taxonomy_repo,
            settings_repo,
            sessions,
            preview_rows=int(import_config.get("preview_rows", DEFAULT_PREVIEW_ROWS)),
            chunk_size=int(import_config.get("chunk_size", DEFAULT_CHUNK_SIZE)),
            max_upload_bytes=int(import_config.get("max_upload_bytes", DEFAULT_MAX_UPLOAD_BYTES)),
        )
        for kind, entity in ENTITIES.items()
    }


def build_container(*, db_config: dict, import_config: Optional[dict] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    taxonomy_repo = MySQLTaxonomyRepository(conn)
    settings_repo = MySQLSettingsRepository(conn)
    record_repos = {kind: MySQLRecordRepository(conn, table=entity.table) for kind, entity in ENTITIES.items()}
    sessions = ImportSessionStore()

    return Container(
        conn=conn,
        taxonomy_repo=taxonomy_repo,
        settings_repo=settings_repo,
        record_repos=record_repos,
        import_sessions=sessions,
        import_services=build_import_services(
            record_repos=record_repos,
            taxonomy_repo=taxonomy_repo,
            settings_repo=settings_repo,
            sessions=sessions,
            import_config=import_config,
        ),
    )
