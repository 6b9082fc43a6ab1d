from __future__ import annotations

from datetime import datetime, timezone

import mysql.connector
import pytest

from src.event_roster.event_roster.core.enums import EntityKind
from src.event_roster.event_roster.core.exceptions import StoreInsertError, StoreLookupError, TaxonomyCreateError
from src.event_roster.event_roster.records.model import InsertCandidate
from src.event_roster.event_roster.records.mysql_record_repository import MySQLRecordRepository
from src.event_roster.event_roster.settings.mysql_settings_repository import MySQLSettingsRepository
from src.event_roster.event_roster.taxonomy.mysql_taxonomy_repository import MySQLTaxonomyRepository


class FakeCursor:
    def __init__(self, results=(), *, fail=None, fail_at=None, rowcounts=()):
        self.results = list(results)
        self.rowcounts = list(rowcounts)
        self.fail = fail
        self.fail_at = fail_at
        self.executed = []
        self.rowcount = 0

    def execute(self, sql, params=None):
        self.executed.append((sql, params))
        if self.fail is not None and self.fail_at in (None, len(self.executed) - 1):
            raise self.fail
        self.rowcount = self.rowcounts.pop(0) if self.rowcounts else 1

    def executemany(self, sql, seq):
        self.executed.append((sql, list(seq)))
        if self.fail is not None:
            raise self.fail

    def fetchall(self):
        return self.results.pop(0) if self.results else []

    def close(self):
        pass


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False

    def cursor(self, dictionary=True):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        pass


class FakeConnectionFactory:
    def __init__(self, cursor):
        self.cursor = cursor
        self.connections = []

    def connect(self, *, with_database=True):
        conn = FakeConnection(self.cursor)
        self.connections.append(conn)
        return conn


def _candidate(record_id):
    now = datetime(2026, 3, 14, tzinfo=timezone.utc)
    return InsertCandidate(
        record_id=record_id,
        fields={"name": "Ada", "role": "Usher"},
        status="Off Duty",
        image_url="https://placehold.co/100x100.png?text=AD",
        created_at=now,
        updated_at=now,
    )


def test_existing_ids_are_found_in_one_round_trip():
    cursor = FakeCursor(results=[[{"id": "p-1"}]])
    repo = MySQLRecordRepository(FakeConnectionFactory(cursor), table="participants")

    found = repo.find_existing_ids({"p-2", "p-1"})

    assert found == {"p-1"}
    assert len(cursor.executed) == 1
    sql, params = cursor.executed[0]
    assert "FROM participants WHERE id IN (%s,%s)" in sql
    assert params == ("p-1", "p-2")


def test_no_ids_means_no_query():
    cursor = FakeCursor()
    repo = MySQLRecordRepository(FakeConnectionFactory(cursor), table="participants")

    assert repo.find_existing_ids([]) == set()
    assert cursor.executed == []


def test_insert_many_is_one_statement_in_one_transaction():
    cursor = FakeCursor()
    factory = FakeConnectionFactory(cursor)
    repo = MySQLRecordRepository(factory, table="staff_members")

    assert repo.insert_many([_candidate("s-1"), _candidate("s-2")]) == 2

    sql, rows = cursor.executed[0]
    assert sql.startswith("INSERT INTO staff_members(id, name, role, status, image_url, created_at, updated_at)")
    assert [r[0] for r in rows] == ["s-1", "s-2"]
    assert factory.connections[0].committed


def test_rejected_insert_rolls_back_and_raises():
    cursor = FakeCursor(fail=mysql.connector.Error(msg="Duplicate entry 's-1'"))
    factory = FakeConnectionFactory(cursor)
    repo = MySQLRecordRepository(factory, table="staff_members")

    with pytest.raises(StoreInsertError):
        repo.insert_many([_candidate("s-1")])

    assert factory.connections[0].rolled_back
    assert not factory.connections[0].committed


def test_append_returns_only_values_that_were_new():
    cursor = FakeCursor(rowcounts=[1, 0])
    repo = MySQLTaxonomyRepository(FakeConnectionFactory(cursor))

    created = repo.append_new_values("organization", ["Org2", "Org3"])

    assert created == ["Org2"]
    assert all("INSERT IGNORE" in sql for sql, _ in cursor.executed)


def test_append_failure_is_a_taxonomy_error():
    cursor = FakeCursor(fail=mysql.connector.Error(msg="read only"))
    repo = MySQLTaxonomyRepository(FakeConnectionFactory(cursor))

    with pytest.raises(TaxonomyCreateError):
        repo.append_new_values("team", ["Press"])


def test_default_status_comes_from_system_settings():
    cursor = FakeCursor(results=[[{"setting_value": " Registered "}]])
    repo = MySQLSettingsRepository(FakeConnectionFactory(cursor))

    assert repo.get_default_status(EntityKind.PARTICIPANT) == "Registered"
    assert cursor.executed[0][1] == ("default_participant_status",)


@pytest.mark.parametrize("kind,expected", [(EntityKind.PARTICIPANT, "Absent"), (EntityKind.STAFF, "Off Duty")])
def test_default_status_falls_back_when_unset(kind, expected):
    repo = MySQLSettingsRepository(FakeConnectionFactory(FakeCursor(results=[[]])))

    assert repo.get_default_status(kind) == expected


def test_lost_connection_during_id_lookup_is_a_lookup_error():
    cursor = FakeCursor(fail=mysql.connector.Error(msg="Lost connection to MySQL server"))
    factory = FakeConnectionFactory(cursor)
    repo = MySQLRecordRepository(factory, table="participants")

    with pytest.raises(StoreLookupError):
        repo.find_existing_ids({"p-1"})

    assert factory.connections[0].rolled_back


def test_exists_failure_is_a_lookup_error():
    repo = MySQLRecordRepository(
        FakeConnectionFactory(FakeCursor(fail=mysql.connector.Error(msg="gone away"))), table="staff_members"
    )

    with pytest.raises(StoreLookupError):
        repo.exists("s-1")


def test_settings_failure_is_a_lookup_error():
    repo = MySQLSettingsRepository(FakeConnectionFactory(FakeCursor(fail=mysql.connector.Error(msg="gone away"))))

    with pytest.raises(StoreLookupError) as exc_info:
        repo.get_default_status(EntityKind.STAFF)

    assert "staff members" in str(exc_info.value)


def test_all_dimensions_are_appended_in_one_transaction():
    cursor = FakeCursor(rowcounts=[1, 1, 0])
    factory = FakeConnectionFactory(cursor)
    repo = MySQLTaxonomyRepository(factory)

    created = repo.append_all_new_values({"organization": ["Org2"], "category": ["C2", "C3"]})

    assert created == {"organization": ["Org2"], "category": ["C2"]}
    assert len(factory.connections) == 1
    assert factory.connections[0].committed


def test_failure_on_a_later_dimension_rolls_back_earlier_ones():
    cursor = FakeCursor(fail=mysql.connector.Error(msg="read only"), fail_at=1)
    factory = FakeConnectionFactory(cursor)
    repo = MySQLTaxonomyRepository(factory)

    with pytest.raises(TaxonomyCreateError) as exc_info:
        repo.append_all_new_values({"organization": ["Org2"], "category": ["C2"]})

    assert "category" in str(exc_info.value)
    assert len(factory.connections) == 1
    assert factory.connections[0].rolled_back
    assert not factory.connections[0].committed
