from __future__ import annotations

from typing import Mapping, Optional, Sequence


def clean(value: Optional[str]) -> str:
    """Trim a possibly-missing cell value to a plain string."""
    return (value or "").strip()


def missing_fields(row: Mapping[str, str], required: Sequence[str]) -> list[str]:
    """Required fields that are absent or blank after trimming, in declared order."""
    return [name for name in required if not clean(row.get(name))]
