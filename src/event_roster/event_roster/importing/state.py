"""Import workflow state machine.

`transition(state, event)` is a pure function: it never touches stores or
the request context, so the HTTP layer only forwards events and renders the
returned state.

    UPLOAD -> PREVIEW -> IMPORTING -> COMPLETE
       ^         |           |
       +--back---+           +-- taxonomy failure -> PREVIEW
       +---------------------+-- import failure  -> UPLOAD
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Union

from ..core.enums import ImportStage
from ..core.exceptions import InvalidTransitionError
from .model import ImportDirective, ImportSummary, PreviewData


@dataclass(frozen=True)
class ImportState:
    stage: ImportStage = ImportStage.UPLOAD
    preview: Optional[PreviewData] = None
    directive: ImportDirective = ImportDirective()
    progress: float = 0.0
    summary: Optional[ImportSummary] = None
    error: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage.value,
            "preview": self.preview.as_dict() if self.preview else None,
            "create_new_taxonomy": self.directive.create_new_taxonomy,
            "progress": round(self.progress, 4),
            "summary": self.summary.as_dict() if self.summary else None,
            "error": self.error,
        }


INITIAL_STATE = ImportState()


@dataclass(frozen=True)
class FileParsed:
    preview: PreviewData


@dataclass(frozen=True)
class UploadFailed:
    message: str


@dataclass(frozen=True)
class ReadProgressed:
    fraction: float


@dataclass(frozen=True)
class DirectiveChanged:
    create_new_taxonomy: bool


@dataclass(frozen=True)
class Back:
    pass


@dataclass(frozen=True)
class Confirmed:
    pass


@dataclass(frozen=True)
class ImportProgressed:
    fraction: float


@dataclass(frozen=True)
class TaxonomyCreateFailed:
    message: str


@dataclass(frozen=True)
class ImportFailed:
    message: str


@dataclass(frozen=True)
class ImportSucceeded:
    summary: ImportSummary


@dataclass(frozen=True)
class Reset:
    pass


Event = Union[
    FileParsed,
    UploadFailed,
    ReadProgressed,
    DirectiveChanged,
    Back,
    Confirmed,
    ImportProgressed,
    TaxonomyCreateFailed,
    ImportFailed,
    ImportSucceeded,
    Reset,
]


def _advance(current: float, fraction: float) -> float:
    return max(current, min(1.0, max(0.0, float(fraction))))


def transition(state: ImportState, event: Event) -> ImportState:
    stage = state.stage

    if isinstance(event, Reset):
        return INITIAL_STATE

    if stage == ImportStage.UPLOAD:
        if isinstance(event, ReadProgressed):
            return replace(state, progress=_advance(state.progress, event.fraction))
        if isinstance(event, FileParsed):
            return ImportState(stage=ImportStage.PREVIEW, preview=event.preview)
        if isinstance(event, UploadFailed):
            return replace(INITIAL_STATE, error=event.message)

    elif stage == ImportStage.PREVIEW:
        if isinstance(event, DirectiveChanged):
            return replace(
                state,
                directive=ImportDirective(create_new_taxonomy=bool(event.create_new_taxonomy)),
                error=None,
            )
        if isinstance(event, Back):
            return INITIAL_STATE
        if isinstance(event, Confirmed):
            return replace(state, stage=ImportStage.IMPORTING, progress=0.0, error=None)

    elif stage == ImportStage.IMPORTING:
        if isinstance(event, ImportProgressed):
            return replace(state, progress=_advance(state.progress, event.fraction))
        if isinstance(event, TaxonomyCreateFailed):
            return replace(state, stage=ImportStage.PREVIEW, progress=0.0, error=event.message)
        if isinstance(event, ImportFailed):
            return replace(INITIAL_STATE, error=event.message)
        if isinstance(event, ImportSucceeded):
            return replace(state, stage=ImportStage.COMPLETE, progress=1.0, summary=event.summary)

    raise InvalidTransitionError(
        f"{type(event).__name__} is not allowed while the import is in stage {stage.value}"
    )
