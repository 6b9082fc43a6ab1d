from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple
from urllib.parse import quote

from ..common.datetime_utils import now_utc
from ..common.validators import clean, missing_fields
from ..core.exceptions import StoreInsertError, StoreLookupError, TaxonomyCreateError
from ..records.model import InsertCandidate
from ..records.repository import RecordRepository
from ..settings.repository import SettingsRepository
from ..taxonomy.repository import TaxonomyRepository
from .entity import EntityConfig
from .model import ImportDirective, ImportSummary, ParsedRow, ValidationResult

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


def avatar_placeholder(entity: EntityConfig, name: str) -> str:
    initials = clean(name)[:2].upper()
    return f"{entity.avatar_prefix}{quote(initials)}"


def build_candidate(
    row: ParsedRow,
    entity: EntityConfig,
    *,
    record_id: str,
    status: str,
    now: datetime,
) -> InsertCandidate:
    fields: Dict[str, str] = {h: clean(row.get(h)) for h in entity.required_fields}
    for header, column in entity.optional_fields:
        fields[column] = clean(row.get(header))
    return InsertCandidate(
        record_id=record_id,
        fields=fields,
        status=status,
        image_url=avatar_placeholder(entity, fields["name"]),
        created_at=now,
        updated_at=now,
    )


async def create_taxonomy_values(
    entity: EntityConfig,
    validation: ValidationResult,
    taxonomy: TaxonomyRepository,
) -> Dict[str, Tuple[str, ...]]:
    pending = {
        d.name: sorted(validation.for_dimension(d.name))
        for d in entity.taxonomy_dimensions
        if validation.for_dimension(d.name)
    }
    if not pending:
        return {}
    try:
        added = await asyncio.to_thread(taxonomy.append_all_new_values, pending)
    except TaxonomyCreateError:
        raise
    except Exception as exc:
        raise TaxonomyCreateError(f"Failed to add new {', '.join(pending)} values.") from exc

    created: Dict[str, Tuple[str, ...]] = {}
    for name in pending:
        created[name] = tuple(added.get(name, ()))
        logger.info("Created %d new %s value(s): %s", len(created[name]), name, list(created[name]))
    return created


async def run_import(
    rows: Sequence[ParsedRow],
    entity: EntityConfig,
    directive: ImportDirective,
    validation: ValidationResult,
    *,
    records: RecordRepository,
    taxonomy: TaxonomyRepository,
    settings: SettingsRepository,
    on_progress: Optional[ProgressCallback] = None,
    skipped_malformed: int = 0,
    now: Optional[datetime] = None,
) -> ImportSummary:
    """Turn parsed rows into records and commit them in one bulk insert.

    Taxonomy values are created first (when requested) so a failure there
    leaves the record store untouched. Existing identifiers are looked up in
    a single query covering every row that passed the required-field check.
    """
    created: Dict[str, Tuple[str, ...]] = {}
    if directive.create_new_taxonomy and validation.has_new_values:
        created = await create_taxonomy_values(entity, validation, taxonomy)

    try:
        status = await asyncio.to_thread(settings.get_default_status, entity.kind)
    except StoreLookupError:
        raise
    except Exception as exc:
        raise StoreLookupError(f"Could not load the default status for new {entity.label}.") from exc
    now = now or now_utc()

    complete = [not missing_fields(row.values, entity.required_fields) for row in rows]
    supplied_ids = {row.identifier for row, ok in zip(rows, complete) if ok and row.identifier}
    existing: Set[str] = set()
    if supplied_ids:
        try:
            existing = set(await asyncio.to_thread(records.find_existing_ids, supplied_ids))
        except StoreLookupError:
            raise
        except Exception as exc:
            raise StoreLookupError(f"Could not check existing {entity.label}. Please try again.") from exc

    batch: List[InsertCandidate] = []
    claimed: Set[str] = set()
    skipped_missing = 0
    skipped_existing = 0
    total = len(rows)

    for index, (row, ok) in enumerate(zip(rows, complete)):
        if not ok:
            skipped_missing += 1
        elif row.identifier and (row.identifier in existing or row.identifier in claimed):
            skipped_existing += 1
        else:
            record_id = row.identifier or str(uuid.uuid4())
            claimed.add(record_id)
            batch.append(build_candidate(row, entity, record_id=record_id, status=status, now=now))
        if on_progress is not None:
            on_progress((index + 1) / total)

    if batch:
        try:
            await asyncio.to_thread(records.insert_many, batch)
        except StoreInsertError:
            raise
        except Exception as exc:
            raise StoreInsertError(f"Failed to save imported {entity.label}.") from exc

    summary = ImportSummary(
        total_rows=total,
        imported=len(batch),
        skipped_missing_fields=skipped_missing,
        skipped_existing_id=skipped_existing,
        skipped_malformed=skipped_malformed,
        created_taxonomy=created,
    )
    logger.info("Import of %s finished: %s", entity.label, summary.as_dict())
    return summary
