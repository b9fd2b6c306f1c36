from __future__ import annotations

import uuid

import pytest

from conftest import add_assignment
from core.database import SessionLocal
from models import Department, Staff
from services.datastore import DiagnosticStore, UnknownTableError
from services.diagnostics import (
    check_data_integrity,
    check_timetable_constraints,
    clear_all_assignments,
    run_full_diagnostic,
)


class FlakyStore(DiagnosticStore):
    def __init__(self, *args, failing=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.failing = set(failing)

    def fetch_rows(self, name, **kwargs):
        if name in self.failing:
            raise RuntimeError(f"permission denied for table {name}")
        return super().fetch_rows(name, **kwargs)

    def count_rows(self, name, **kwargs):
        if name in self.failing:
            raise RuntimeError(f"permission denied for table {name}")
        return super().count_rows(name, **kwargs)


class CountingStore(DiagnosticStore):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.delete_calls = 0

    def delete_all(self, name):
        self.delete_calls += 1
        return super().delete_all(name)


class BrokenStore(DiagnosticStore):
    def load_snapshot(self, tables, **kwargs):
        raise ConnectionError("could not connect to server")


def test_store_reads_and_counts(store, seeded):
    rows = store.fetch_rows("sections", filters={"department_id": seeded["department_id"]})
    assert [r["name"] for r in rows] == ["CSE-A"]
    assert store.count_rows("departments") == 1
    assert "room_number" in store.table_columns("rooms")
    assert store.ping()


def test_store_rejects_unknown_table(store):
    with pytest.raises(UnknownTableError):
        store.fetch_rows("users")


def test_snapshot_isolates_failures(engine, seeded):
    store = FlakyStore(SessionLocal, failing={"rooms"})
    snapshot = store.load_snapshot(["departments", "rooms", "staff"])

    assert isinstance(snapshot["rooms"], RuntimeError)
    assert len(snapshot["departments"]) == 1
    assert len(snapshot["staff"]) == 1


def test_healthy_database(db, store, seeded):
    add_assignment(db, seeded)

    result = run_full_diagnostic(store)

    assert result.success
    assert result.healthy
    assert result.issues == []
    assert result.data["counts"]["departments"] == 1
    assert result.data["existing_timetables"] == 1
    assert result.data["conflict_summary"] == {"staff_conflicts": 0, "room_conflicts": 0, "section_conflicts": 0}
    assert result.report.startswith("DATABASE DIAGNOSTIC REPORT")
    assert "Table: timetables" in result.report
    assert "No critical issues found!" in result.report


def test_empty_database_ran_but_is_unhealthy(store):
    result = run_full_diagnostic(store)

    assert result.success
    assert not result.healthy
    assert "No data found in departments table" in result.issues
    assert "No staff-subject relationships found" in result.issues
    # Empty essential tables are reported once, by the integrity check.
    assert not any(i.startswith("At least one") for i in result.issues)
    assert "1. No data found in departments table" in result.report


def test_conflicts_flow_into_result(db, store, seeded):
    other_room = uuid.uuid4()
    add_assignment(db, seeded, day_of_week=2, time_slot=3)
    add_assignment(db, seeded, day_of_week=2, time_slot=3, room_id=other_room, section_id=uuid.uuid4())

    result = run_full_diagnostic(store)

    assert result.success
    assert result.data["conflict_summary"] == {"staff_conflicts": 1, "room_conflicts": 0, "section_conflicts": 0}
    assert f"Staff conflict at {seeded['staff_id']}:2:3: 2 entries" in result.issues
    assert (
        "Clear existing timetables before generating new ones to resolve 1 staff conflicts"
        in result.recommendations
    )
    assert "- Staff conflicts: 1" in result.report


def test_department_without_sections(db, store, seeded):
    db.add(Department(code="ME", name="Mechanical"))
    db.commit()

    result = run_full_diagnostic(store)

    assert 'Department "Mechanical" has no sections' in result.issues
    assert 'Add sections for department "Mechanical"' in result.recommendations
    assert 'Department "Computer Science": 1 sections' in result.report


def test_minimum_row_threshold(db, store, seeded):
    result = run_full_diagnostic(store, min_rows=2)

    assert "At least one staff member needed (staff has 1, need 2+)" in result.issues
    assert "Add more data to staff table" in result.recommendations
    assert "[FAIL] staff: 1 records (need 2+)" in result.report

    db.add(Staff(department_id=seeded["department_id"], name="K. Rao", designation="Professor"))
    db.commit()
    result = run_full_diagnostic(store, min_rows=2)
    assert "[OK] staff: 2 records (need 2+)" in result.report


def test_timetable_fetch_failure_is_an_issue(engine, seeded):
    store = FlakyStore(SessionLocal, failing={"timetables"})

    result = run_full_diagnostic(store)

    assert result.success
    assert "Failed to fetch existing timetables: permission denied for table timetables" in result.issues
    assert result.data["conflict_summary"] is None
    assert "Status: ERROR - permission denied for table timetables" in result.report


def test_reference_table_failure_is_an_issue(engine, seeded):
    store = FlakyStore(SessionLocal, failing={"subjects"})

    result = run_full_diagnostic(store)

    assert result.success
    assert "Error accessing subjects: permission denied for table subjects" in result.issues
    assert result.data["tables"]["subjects"] == "error"
    assert "[ERROR] subjects: unavailable" in result.report


def test_fatal_error_is_reported_not_raised(engine):
    result = run_full_diagnostic(BrokenStore(SessionLocal))

    assert not result.success
    assert result.report == "Diagnostic failed: could not connect to server"
    assert result.issues == ["Critical error: could not connect to server"]
    assert result.recommendations == ["Check database connection and permissions"]


def test_separate_checks(db, store, seeded):
    add_assignment(db, seeded)
    add_assignment(db, seeded)

    conflicts, error = check_timetable_constraints(store)
    assert error is None
    assert conflicts.summary() == {"staff_conflicts": 1, "room_conflicts": 1, "section_conflicts": 1}

    integrity = check_data_integrity(store)
    assert integrity.success


def test_clear_on_empty_table_issues_no_delete(engine):
    store = CountingStore(SessionLocal)

    result = clear_all_assignments(store)

    assert result.success
    assert result.cleared_count == 0
    assert result.message == "No timetable entries to clear"
    assert store.delete_calls == 0


def test_clear_removes_everything(db, engine, seeded):
    for slot in (1, 2, 3):
        add_assignment(db, seeded, time_slot=slot)
    store = CountingStore(SessionLocal)

    result = clear_all_assignments(store)

    assert result.success
    assert result.cleared_count == 3
    assert result.message == "Successfully cleared 3 timetable entries"
    assert store.delete_calls == 1
    assert store.count_rows("timetables") == 0


def test_clear_failure_is_reported(engine):
    class FailingCount(DiagnosticStore):
        def count_rows(self, name, **kwargs):
            raise RuntimeError("permission denied")

    result = clear_all_assignments(FailingCount(SessionLocal))

    assert not result.success
    assert result.cleared_count == 0
    assert result.message == "Failed to clear timetables: permission denied"


class RecordingStore(DiagnosticStore):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fetched = []

    def fetch_rows(self, name, **kwargs):
        self.fetched.append(name)
        return super().fetch_rows(name, **kwargs)


def test_full_diagnostic_counts_reference_tables(db, engine, seeded):
    add_assignment(db, seeded)
    store = RecordingStore(SessionLocal)

    result = run_full_diagnostic(store)

    assert sorted(store.fetched) == ["departments", "sections", "timetables"]
    assert result.data["counts"]["rooms"] == 1
    assert "Table: staff_subjects\n   Status: Connected\n   Records: 1\n" in result.report


def test_integrity_check_only_counts(engine, seeded):
    store = RecordingStore(SessionLocal)

    report = check_data_integrity(store)

    assert store.fetched == []
    assert report.success
    assert report.counts["staff_subjects"] == 1
