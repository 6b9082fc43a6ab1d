from __future__ import annotations

from typing import Iterable


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidTransitionError(DomainError):
    """Raised when an import event is not allowed in the current stage."""


class ImportPipelineError(DomainError):
    """Base for failures that abort an import attempt.

    The message is shown to the operator as-is.
    """


class ReadError(ImportPipelineError):
    """Raised when the uploaded file cannot be read or is not delimited text."""


class FormatError(ImportPipelineError):
    """Raised when the file shape is unusable (missing headers, no data lines)."""

    def __init__(self, message: str, *, missing_headers: Iterable[str] = ()):
        super().__init__(message)
        self.missing_headers = tuple(missing_headers)


class ValidationServiceError(ImportPipelineError):
    """Raised when the taxonomy lookup fails."""


class TaxonomyCreateError(ImportPipelineError):
    """Raised when new taxonomy values could not be appended."""


class StoreInsertError(ImportPipelineError):
    """Raised when the record store rejects the bulk insert."""


class StoreLookupError(ImportPipelineError):
    """Raised when the record store or system settings cannot be queried."""
