from __future__ import annotations

import csv
import io
import logging
import threading
from dataclasses import dataclass
from typing import BinaryIO, Dict, Optional, Tuple

from ..core.constants import DEFAULT_CHUNK_SIZE, DEFAULT_MAX_UPLOAD_BYTES, DEFAULT_PREVIEW_ROWS
from ..core.enums import EntityKind, ImportStage
from ..core.exceptions import ImportPipelineError, InvalidTransitionError, TaxonomyCreateError
from ..records.repository import RecordRepository
from ..settings.repository import SettingsRepository
from ..taxonomy.repository import TaxonomyRepository
from .entity import EntityConfig
from .importer import run_import
from .ingestor import read_upload
from .model import ParsedRow, PreviewData
from .parser import parse_rows
from .state import (
    INITIAL_STATE,
    Back,
    Confirmed,
    DirectiveChanged,
    Event,
    FileParsed,
    ImportFailed,
    ImportProgressed,
    ImportState,
    ImportSucceeded,
    ReadProgressed,
    Reset,
    TaxonomyCreateFailed,
    UploadFailed,
    transition,
)
from .validator import detect_new_taxonomy

logger = logging.getLogger(__name__)


@dataclass
class ImportSession:
    state: ImportState = INITIAL_STATE
    rows: Tuple[ParsedRow, ...] = ()


class ImportSessionStore:
    """In-process import sessions keyed by (operator token, entity kind)."""

    def __init__(self):
        self._lock = threading.Lock()
        self._sessions: Dict[Tuple[str, EntityKind], ImportSession] = {}

    def get(self, token: str, kind: EntityKind) -> ImportSession:
        with self._lock:
            return self._sessions.setdefault((token, kind), ImportSession())

    def apply(self, token: str, kind: EntityKind, event: Event, *, rows: Optional[Tuple[ParsedRow, ...]] = None) -> ImportState:
        with self._lock:
            session = self._sessions.setdefault((token, kind), ImportSession())
            session.state = transition(session.state, event)
            if rows is not None:
                session.rows = rows
            return session.state

    def restart(self, token: str, kind: EntityKind) -> ImportState:
        """Reset to UPLOAD unless an import is running; those cannot be cancelled."""
        with self._lock:
            session = self._sessions.setdefault((token, kind), ImportSession())
            if session.state.stage == ImportStage.IMPORTING:
                raise InvalidTransitionError("An import is already running and cannot be cancelled.")
            session.state = transition(session.state, Reset())
            session.rows = ()
            return session.state


class ImportService:
    """Use case: bulk import of one record kind from an uploaded CSV file."""

    def __init__(
        self,
        entity: EntityConfig,
        records: RecordRepository,
        taxonomy: TaxonomyRepository,
        settings: SettingsRepository,
        sessions: ImportSessionStore,
        *,
        preview_rows: int = DEFAULT_PREVIEW_ROWS,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ):
        self._entity = entity
        self._records = records
        self._taxonomy = taxonomy
        self._settings = settings
        self._sessions = sessions
        self._preview_rows = max(0, int(preview_rows))
        self._chunk_size = chunk_size
        self._max_upload_bytes = max_upload_bytes

    @property
    def entity(self) -> EntityConfig:
        return self._entity

    def _dispatch(self, token: str, event: Event, *, rows: Optional[Tuple[ParsedRow, ...]] = None) -> ImportState:
        return self._sessions.apply(token, self._entity.kind, event, rows=rows)

    def state(self, token: str) -> ImportState:
        return self._sessions.get(token, self._entity.kind).state

    async def upload(
        self,
        token: str,
        stream: BinaryIO,
        *,
        filename: str,
        media_type: Optional[str],
        total_bytes: Optional[int] = None,
    ) -> ImportState:
        # Picking a new file always starts over.
        self._sessions.restart(token, self._entity.kind)

        try:
            text = await read_upload(
                stream,
                filename=filename,
                media_type=media_type,
                total_bytes=total_bytes,
                on_progress=lambda f: self._dispatch(token, ReadProgressed(f)),
                chunk_size=self._chunk_size,
                max_bytes=self._max_upload_bytes,
            )
            parsed = parse_rows(text, self._entity)
            validation = await detect_new_taxonomy(parsed.rows, self._entity, self._taxonomy)
        except ImportPipelineError as exc:
            logger.warning("Upload of %s for %s rejected: %s", filename, self._entity.label, exc)
            self._dispatch(token, UploadFailed(str(exc)), rows=())
            raise

        preview = PreviewData(
            filename=filename,
            headers=parsed.headers,
            total_rows=len(parsed.rows),
            sample=tuple(r.values for r in parsed.rows[: self._preview_rows]),
            skipped_malformed=parsed.skipped_malformed,
            validation=validation,
        )
        return self._dispatch(token, FileParsed(preview), rows=parsed.rows)

    def reject_upload(self, token: str, message: str) -> ImportState:
        """Record an upload refused before it reached the pipeline (e.g. too large)."""
        self._sessions.restart(token, self._entity.kind)
        return self._dispatch(token, UploadFailed(message), rows=())

    def set_directive(self, token: str, *, create_new_taxonomy: bool) -> ImportState:
        return self._dispatch(token, DirectiveChanged(create_new_taxonomy))

    def back(self, token: str) -> ImportState:
        return self._dispatch(token, Back(), rows=())

    def reset(self, token: str) -> ImportState:
        return self._sessions.restart(token, self._entity.kind)

    async def confirm(self, token: str) -> ImportState:
        state = self._dispatch(token, Confirmed())
        rows = self._sessions.get(token, self._entity.kind).rows
        preview = state.preview

        try:
            summary = await run_import(
                rows,
                self._entity,
                state.directive,
                preview.validation,
                records=self._records,
                taxonomy=self._taxonomy,
                settings=self._settings,
                on_progress=lambda f: self._dispatch(token, ImportProgressed(f)),
                skipped_malformed=preview.skipped_malformed,
            )
        except TaxonomyCreateError as exc:
            logger.warning("Import of %s stopped before any row: %s", self._entity.label, exc)
            self._dispatch(token, TaxonomyCreateFailed(str(exc)))
            raise
        except ImportPipelineError as exc:
            logger.error("Import of %s failed: %s", self._entity.label, exc)
            self._dispatch(token, ImportFailed(str(exc)), rows=())
            raise
        except Exception:
            logger.exception("Unexpected error while importing %s", self._entity.label)
            self._dispatch(token, ImportFailed("Unexpected error during import."), rows=())
            raise

        return self._dispatch(token, ImportSucceeded(summary), rows=())

    def template_csv(self) -> str:
        """Example file matching the accepted header contract."""
        out = io.StringIO()
        writer = csv.writer(out, lineterminator="\r\n")
        writer.writerow(self._entity.template_headers)
        writer.writerow(self._entity.template_row)
        return out.getvalue()
