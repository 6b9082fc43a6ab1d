from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.event_roster.event_roster.importing.entity import PARTICIPANT, STAFF
from src.event_roster.event_roster.importing.service import ImportService, ImportSessionStore
from tests.fakes import FakeRecords, FakeSettings, FakeTaxonomy


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 14, 9, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def call_log() -> list:
    return []


@pytest.fixture
def records(call_log) -> FakeRecords:
    return FakeRecords(log=call_log)


@pytest.fixture
def taxonomy(call_log) -> FakeTaxonomy:
    return FakeTaxonomy(
        {
            "organization": {"Org1"},
            "category": {"Committee1"},
            "team": {"Venue Team"},
        },
        log=call_log,
    )


@pytest.fixture
def settings() -> FakeSettings:
    return FakeSettings()


@pytest.fixture
def participant():
    return PARTICIPANT


@pytest.fixture
def staff():
    return STAFF


@pytest.fixture
def make_service(records, taxonomy, settings):
    def _make(entity=PARTICIPANT, *, records_repo=None, taxonomy_repo=None, preview_rows: int = 2) -> ImportService:
        return ImportService(
            entity,
            records_repo if records_repo is not None else records,
            taxonomy_repo if taxonomy_repo is not None else taxonomy,
            settings,
            ImportSessionStore(),
            preview_rows=preview_rows,
            chunk_size=8,
        )

    return _make
