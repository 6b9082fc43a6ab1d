from __future__ import annotations

from typing import Collection, Protocol, Sequence, Set

from .model import InsertCandidate


class RecordRepository(Protocol):
    """Giao diện repository cho participant/staff records.

    Lưu ý (DIP): tầng import phụ thuộc vào interface này, không phụ thuộc trực tiếp DB cụ thể.
    Implementations raise StoreInsertError when insert_many is rejected; the
    whole batch is applied or none of it is.
    """

    def exists(self, record_id: str) -> bool:
        raise NotImplementedError

    def find_existing_ids(self, record_ids: Collection[str]) -> Set[str]:
        raise NotImplementedError

    def insert_many(self, records: Sequence[InsertCandidate]) -> int:
        raise NotImplementedError
