"""In-memory stand-ins for the record, taxonomy and settings stores."""

from __future__ import annotations

from typing import Collection, Mapping, Optional, Sequence

from src.event_roster.event_roster.core.enums import EntityKind


class FakeRecords:
    """In-memory record store that remembers every call made to it."""

    def __init__(
        self,
        existing: Collection[str] = (),
        *,
        fail_insert: Optional[Exception] = None,
        fail_lookup: Optional[Exception] = None,
        log: Optional[list] = None,
    ):
        self.ids = set(existing)
        self.inserted = []
        self.lookups: list[set[str]] = []
        self.exists_calls: list[str] = []
        self.insert_calls = 0
        self.fail_insert = fail_insert
        self.fail_lookup = fail_lookup
        self.log = log if log is not None else []

    def exists(self, record_id: str) -> bool:
        self.exists_calls.append(record_id)
        return record_id in self.ids

    def find_existing_ids(self, record_ids: Collection[str]) -> set[str]:
        ids = set(record_ids)
        self.lookups.append(ids)
        self.log.append(("find_existing_ids", sorted(ids)))
        if self.fail_lookup is not None:
            raise self.fail_lookup
        return ids & self.ids

    def insert_many(self, records: Sequence) -> int:
        self.insert_calls += 1
        self.log.append(("insert_many", [r.record_id for r in records]))
        if self.fail_insert is not None:
            raise self.fail_insert
        self.inserted.extend(records)
        self.ids.update(r.record_id for r in records)
        return len(records)

    @property
    def call_count(self) -> int:
        return len(self.lookups) + len(self.exists_calls) + self.insert_calls


class FakeTaxonomy:
    """Taxonomy store; append_all_new_values applies every dimension or none."""

    def __init__(
        self,
        known: Optional[dict[str, Collection[str]]] = None,
        *,
        fail_list: Optional[Exception] = None,
        fail_append: Optional[Exception] = None,
        fail_dimension: Optional[str] = None,
        log: Optional[list] = None,
    ):
        self.known = {d: set(v) for d, v in (known or {}).items()}
        self.fail_list = fail_list
        self.fail_append = fail_append
        self.fail_dimension = fail_dimension
        self.list_calls: list[str] = []
        self.append_calls: list[tuple[str, list[str]]] = []
        self.log = log if log is not None else []

    def list_known_values(self, dimension: str) -> set[str]:
        self.list_calls.append(dimension)
        if self.fail_list is not None:
            raise self.fail_list
        return set(self.known.get(dimension, ()))

    def append_new_values(self, dimension: str, values: Collection[str]) -> list[str]:
        return self.append_all_new_values({dimension: values})[dimension]

    def append_all_new_values(self, values_by_dimension: Mapping[str, Collection[str]]) -> dict[str, list[str]]:
        staged: dict[str, list[str]] = {}
        for dimension, values in values_by_dimension.items():
            values = list(values)
            self.append_calls.append((dimension, values))
            self.log.append(("append_new_values", dimension, values))
            if self.fail_append is not None and self.fail_dimension in (None, dimension):
                raise self.fail_append
            bucket = self.known.get(dimension, set())
            staged[dimension] = [v for v in values if v not in bucket]
        for dimension, created in staged.items():
            self.known.setdefault(dimension, set()).update(created)
        return staged


class FakeSettings:
    def __init__(self, statuses: Optional[dict[EntityKind, str]] = None):
        self.statuses = statuses or {EntityKind.PARTICIPANT: "Absent", EntityKind.STAFF: "Off Duty"}
        self.calls = 0

    def get_default_status(self, entity_kind: EntityKind) -> str:
        self.calls += 1
        return self.statuses[entity_kind]


