from __future__ import annotations

from enum import Enum


class EntityKind(str, Enum):
    """Loại bản ghi có thể nhập hàng loạt."""

    PARTICIPANT = "participant"
    STAFF = "staff"


class ImportStage(str, Enum):
    """Các bước của luồng nhập CSV."""

    UPLOAD = "UPLOAD"
    PREVIEW = "PREVIEW"
    IMPORTING = "IMPORTING"
    COMPLETE = "COMPLETE"
