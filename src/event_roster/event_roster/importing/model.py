from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

from ..core.constants import IDENTIFIER_HEADER


@dataclass(frozen=True)
class ParsedRow:
    """One data line of the file, keyed by normalized header name."""

    values: Mapping[str, str]
    line_number: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def get(self, header: str, default: Optional[str] = None) -> Optional[str]:
        return self.values.get(header, default)

    @property
    def identifier(self) -> str:
        return (self.values.get(IDENTIFIER_HEADER) or "").strip()


@dataclass(frozen=True)
class ParseResult:
    headers: Tuple[str, ...]
    rows: Tuple[ParsedRow, ...]
    skipped_malformed: int = 0


@dataclass(frozen=True)
class ValidationResult:
    """Values found in the file but not yet in the taxonomy, per dimension."""

    new_values: Mapping[str, FrozenSet[str]] = field(default_factory=dict)

    def for_dimension(self, dimension: str) -> FrozenSet[str]:
        return self.new_values.get(dimension, frozenset())

    @property
    def has_new_values(self) -> bool:
        return any(self.new_values.values())

    def as_dict(self) -> Dict[str, List[str]]:
        return {d: sorted(v) for d, v in self.new_values.items()}


@dataclass(frozen=True)
class ImportDirective:
    create_new_taxonomy: bool = True


@dataclass(frozen=True)
class PreviewData:
    filename: str
    headers: Tuple[str, ...]
    total_rows: int
    sample: Tuple[Mapping[str, str], ...]
    skipped_malformed: int
    validation: ValidationResult

    def as_dict(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "headers": list(self.headers),
            "total_rows": self.total_rows,
            "sample": [dict(r) for r in self.sample],
            "skipped_malformed": self.skipped_malformed,
            "new_taxonomy": self.validation.as_dict(),
        }


@dataclass(frozen=True)
class ImportSummary:
    total_rows: int
    imported: int
    skipped_missing_fields: int
    skipped_existing_id: int
    skipped_malformed: int
    created_taxonomy: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)

    @property
    def skipped(self) -> int:
        return self.skipped_missing_fields + self.skipped_existing_id + self.skipped_malformed

    def message(self, label: str = "records") -> str:
        parts = [f"{self.imported} {label} imported."]
        if self.skipped_missing_fields:
            parts.append(f"{self.skipped_missing_fields} skipped for missing required fields.")
        if self.skipped_existing_id:
            parts.append(f"{self.skipped_existing_id} skipped because the ID already exists.")
        if self.skipped_malformed:
            parts.append(f"{self.skipped_malformed} malformed line(s) skipped.")
        created = sum(len(v) for v in self.created_taxonomy.values())
        if created:
            parts.append(f"{created} new list value(s) created.")
        return " ".join(parts)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "total_rows": self.total_rows,
            "imported": self.imported,
            "skipped": self.skipped,
            "skipped_missing_fields": self.skipped_missing_fields,
            "skipped_existing_id": self.skipped_existing_id,
            "skipped_malformed": self.skipped_malformed,
            "created_taxonomy": {d: list(v) for d, v in self.created_taxonomy.items()},
        }
