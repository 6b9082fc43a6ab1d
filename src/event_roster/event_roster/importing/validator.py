from __future__ import annotations

import asyncio
import logging
from typing import Dict, FrozenSet, Iterable, Sequence

from ..common.validators import clean
from ..core.exceptions import ValidationServiceError
from ..taxonomy.repository import TaxonomyRepository
from .entity import EntityConfig
from .model import ParsedRow, ValidationResult

logger = logging.getLogger(__name__)


def new_values(row_values: Iterable[str], known: Iterable[str]) -> FrozenSet[str]:
    """Distinct trimmed, non-empty values not present in `known` (exact match)."""
    observed = {clean(v) for v in row_values} - {""}
    return frozenset(observed - {clean(k) for k in known})


async def detect_new_taxonomy(
    rows: Sequence[ParsedRow],
    entity: EntityConfig,
    taxonomy: TaxonomyRepository,
) -> ValidationResult:
    result: Dict[str, FrozenSet[str]] = {}
    for dimension in entity.taxonomy_dimensions:
        try:
            known = await asyncio.to_thread(taxonomy.list_known_values, dimension.name)
        except ValidationServiceError:
            raise
        except Exception as exc:
            raise ValidationServiceError(
                f"Error during validation: could not load known {dimension.name} values."
            ) from exc
        result[dimension.name] = new_values((r.get(dimension.header) or "" for r in rows), known)

    validation = ValidationResult(new_values=result)
    if validation.has_new_values:
        logger.info("New %s list values detected: %s", entity.label, validation.as_dict())
    return validation
