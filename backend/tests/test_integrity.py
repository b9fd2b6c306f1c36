from __future__ import annotations

from services.integrity import LINK_TABLE, REQUIRED_TABLES, check_integrity


def _full_snapshot():
    return {table: [{"id": 1}] for table in (*REQUIRED_TABLES, LINK_TABLE)}


def test_all_tables_populated():
    report = check_integrity(_full_snapshot())
    assert report.success
    assert report.issues == []
    assert report.recommendations == []
    assert all(report.reachable.values())
    assert report.counts["staff_subjects"] == 1


def test_missing_staff_subject_links():
    snapshot = _full_snapshot()
    snapshot["staff_subjects"] = []

    report = check_integrity(snapshot)

    assert not report.success
    assert report.issues == ["No staff-subject relationships found"]
    assert report.recommendations == ["Assign subjects to staff members in the staff management page"]
    assert report.counts["staff_subjects"] == 0


def test_empty_reference_table():
    snapshot = _full_snapshot()
    snapshot["rooms"] = []

    report = check_integrity(snapshot)

    assert report.issues == ["No data found in rooms table"]
    assert report.recommendations == ["Add data to rooms table before generating timetables"]


def test_access_error_does_not_stop_the_check():
    snapshot = _full_snapshot()
    snapshot["staff"] = PermissionError("permission denied for table staff")
    snapshot["college_timings"] = []

    report = check_integrity(snapshot)

    assert report.issues == [
        "Error accessing staff: permission denied for table staff",
        "No data found in college_timings table",
    ]
    assert report.reachable["staff"] is False
    assert report.counts["staff"] == 0
    assert report.reachable["staff_subjects"] is True


def test_table_missing_from_snapshot_is_an_access_error():
    snapshot = _full_snapshot()
    del snapshot["departments"]

    report = check_integrity(snapshot)

    assert report.issues == ["Error accessing departments: departments was not loaded"]
    assert not report.success


def test_counts_in_place_of_rows():
    snapshot = {table: 4 for table in (*REQUIRED_TABLES, LINK_TABLE)}
    snapshot["rooms"] = 0

    report = check_integrity(snapshot)

    assert report.issues == ["No data found in rooms table"]
    assert report.counts["staff"] == 4
    assert report.reachable["rooms"] is True
