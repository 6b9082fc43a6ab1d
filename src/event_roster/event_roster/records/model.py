from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Mapping


@dataclass(frozen=True)
class InsertCandidate:
    """Bản ghi đã điền đủ mặc định, sẵn sàng ghi vào record store.

    Lưu ý: Đây là đối tượng dữ liệu thuần (không chứa code truy cập DB).
    """

    record_id: str
    fields: Mapping[str, str]
    status: str
    image_url: str
    created_at: datetime
    updated_at: datetime

    def as_row(self) -> Dict[str, Any]:
        row: Dict[str, Any] = {"id": self.record_id}
        row.update(self.fields)
        row["status"] = self.status
        row["image_url"] = self.image_url
        row["created_at"] = self.created_at
        row["updated_at"] = self.updated_at
        return row
