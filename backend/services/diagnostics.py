from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from core.config import settings
from services.conflict_scanner import ConflictReport, scan
from services.datastore import DiagnosticStore
from services.integrity import LINK_TABLE, REQUIRED_TABLES, IntegrityReport, check_integrity


logger = logging.getLogger(__name__)


ASSIGNMENTS_TABLE = "timetables"
CHECKED_TABLES: tuple[str, ...] = (*REQUIRED_TABLES, LINK_TABLE, ASSIGNMENTS_TABLE)
# Tables whose rows the report inspects; the rest are only counted.
ROW_TABLES: tuple[str, ...] = ("departments", "sections", ASSIGNMENTS_TABLE)

# (table, message) pairs for the minimum row-count validation block.
ESSENTIAL_TABLES: tuple[tuple[str, str], ...] = (
    ("departments", "At least one department needed"),
    ("staff", "At least one staff member needed"),
    ("rooms", "At least one room needed"),
    ("sections", "At least one section needed"),
    ("subjects", "At least one subject needed"),
)

_RULE = "=" * 50
_SUBRULE = "-" * 30


@dataclass
class DiagnosticResult:
    success: bool
    report: str
    issues: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def healthy(self) -> bool:
        return self.success and not self.issues


@dataclass
class ClearResult:
    success: bool
    message: str
    cleared_count: int = 0


def _relationship_checks(
    snapshot: dict[str, Any],
    integrity: IntegrityReport,
    *,
    min_rows: int,
) -> tuple[list[str], list[str], list[str]]:
    """Return (report lines, issues, recommendations) for cross-table checks."""

    lines: list[str] = ["Relationship Checks", _SUBRULE]
    issues: list[str] = []
    recommendations: list[str] = []

    departments = snapshot.get("departments")
    sections = snapshot.get("sections")
    if isinstance(departments, list) and isinstance(sections, list):
        per_department = Counter(str(s.get("department_id")) for s in sections)
        for dept in departments:
            name = dept.get("name")
            n = per_department.get(str(dept.get("id")), 0)
            lines.append(f'Department "{name}": {n} sections')
            if n == 0:
                issues.append(f'Department "{name}" has no sections')
                recommendations.append(f'Add sections for department "{name}"')
    lines.append("")
    lines.append(f"Staff-Subject mappings: {integrity.counts.get(LINK_TABLE, 0)}")

    lines += ["", "Data Validation", _SUBRULE]
    for table, message in ESSENTIAL_TABLES:
        if not integrity.reachable.get(table, False):
            lines.append(f"[ERROR] {table}: unavailable")
            continue
        actual = integrity.counts.get(table, 0)
        status = "OK" if actual >= min_rows else "FAIL"
        lines.append(f"[{status}] {table}: {actual} records (need {min_rows}+)")
        # Empty tables were already reported by the integrity check.
        if 0 < actual < min_rows:
            issues.append(f"{message} ({table} has {actual}, need {min_rows}+)")
            recommendations.append(f"Add more data to {table} table")

    return lines, issues, recommendations


def _table_block(store: DiagnosticStore, table: str, value: Any) -> list[str]:
    lines = [f"Table: {table}"]
    if isinstance(value, BaseException):
        lines.append(f"   Status: ERROR - {value}")
    else:
        lines.append("   Status: Connected")
        lines.append(f"   Records: {value if isinstance(value, int) else len(value)}")
        lines.append(f"   Columns: {', '.join(store.table_columns(table))}")
    lines.append("")
    return lines


def _conflict_block(conflicts: ConflictReport | None, fetch_error: BaseException | None) -> list[str]:
    lines = ["Constraint Conflicts", _SUBRULE]
    if conflicts is None:
        lines.append(f"Existing Timetables: unavailable ({fetch_error})")
        return lines
    lines.append(f"Existing Timetables: {conflicts.total_entries} entries")
    lines.append(f"- Staff conflicts: {conflicts.staff_conflicts}")
    lines.append(f"- Room conflicts: {conflicts.room_conflicts}")
    lines.append(f"- Section conflicts: {conflicts.section_conflicts}")
    return lines


def _summary_block(issues: list[str], recommendations: list[str]) -> list[str]:
    lines = [_RULE, f"Total Issues: {len(issues)}", f"Total Recommendations: {len(recommendations)}"]
    if not issues:
        lines.append("No critical issues found!")
    else:
        lines += ["", "Issues Found:"]
        lines += [f"{i}. {issue}" for i, issue in enumerate(issues, start=1)]
    if recommendations:
        lines += ["", "Recommendations:"]
        lines += [f"{i}. {rec}" for i, rec in enumerate(recommendations, start=1)]
    return lines


def check_timetable_constraints(store: DiagnosticStore) -> tuple[ConflictReport | None, Exception | None]:
    """Scan persisted assignments for double-booking. Returns (report, fetch error)."""

    try:
        rows = store.fetch_rows(ASSIGNMENTS_TABLE, order_by=("section_id", "day_of_week", "time_slot"))
    except Exception as exc:
        logger.warning("Failed to fetch existing timetables: %s", exc)
        return None, exc
    return scan(rows), None


def check_data_integrity(store: DiagnosticStore) -> IntegrityReport:
    tables = (*REQUIRED_TABLES, LINK_TABLE)
    return check_integrity(store.load_snapshot(tables, count_only=tables))


def run_full_diagnostic(store: DiagnosticStore, *, min_rows: int | None = None) -> DiagnosticResult:
    """Run the integrity check, relationship checks and conflict scan as one read-only pass.

    ``success`` says whether the pass ran to completion; ``healthy`` says
    whether it found nothing wrong. Never raises.
    """

    min_rows = min_rows if min_rows is not None else settings.diagnostic_min_rows
    logger.info("Running full database diagnostic")

    try:
        snapshot = store.load_snapshot(
            CHECKED_TABLES, count_only=[t for t in CHECKED_TABLES if t not in ROW_TABLES]
        )
        integrity = check_integrity(snapshot)

        issues = list(integrity.issues)
        recommendations = list(integrity.recommendations)

        lines = ["DATABASE DIAGNOSTIC REPORT", _RULE, ""]
        for table in CHECKED_TABLES:
            lines += _table_block(store, table, snapshot[table])

        rel_lines, rel_issues, rel_recs = _relationship_checks(snapshot, integrity, min_rows=min_rows)
        lines += rel_lines
        lines.append("")
        issues += rel_issues
        recommendations += rel_recs

        assignments = snapshot[ASSIGNMENTS_TABLE]
        conflicts: ConflictReport | None = None
        fetch_error: BaseException | None = None
        if isinstance(assignments, BaseException):
            fetch_error = assignments
            issues.append(f"Failed to fetch existing timetables: {assignments}")
        else:
            conflicts = scan(assignments)
            issues += conflicts.issues
            recommendations += conflicts.recommendations
        lines += _conflict_block(conflicts, fetch_error)
        lines.append("")
        lines += _summary_block(issues, recommendations)

        tables_status = {
            table: ("error" if isinstance(value, BaseException) else "ok") for table, value in snapshot.items()
        }
        data: dict[str, Any] = {
            "counts": dict(integrity.counts),
            "tables": tables_status,
            "existing_timetables": conflicts.total_entries if conflicts is not None else 0,
            "conflict_summary": conflicts.summary() if conflicts is not None else None,
        }
    except Exception as exc:
        logger.exception("Database diagnostic failed")
        return DiagnosticResult(
            success=False,
            report=f"Diagnostic failed: {exc}",
            issues=[f"Critical error: {exc}"],
            recommendations=["Check database connection and permissions"],
        )

    if issues:
        logger.info("Diagnostic found %d issue(s)", len(issues))
    else:
        logger.info("No database constraint issues found")

    return DiagnosticResult(
        success=True,
        report="\n".join(lines) + "\n",
        issues=issues,
        recommendations=recommendations,
        data=data,
    )


def clear_all_assignments(store: DiagnosticStore) -> ClearResult:
    """Delete every timetable row. A table that is already empty is left untouched."""

    logger.info("Clearing all timetable entries")
    try:
        count = store.count_rows(ASSIGNMENTS_TABLE)
        if count == 0:
            return ClearResult(success=True, message="No timetable entries to clear", cleared_count=0)
        store.delete_all(ASSIGNMENTS_TABLE)
    except Exception as exc:
        logger.exception("Failed to clear timetables")
        return ClearResult(success=False, message=f"Failed to clear timetables: {exc}", cleared_count=0)

    logger.info("Cleared %d timetable entries", count)
    return ClearResult(success=True, message=f"Successfully cleared {count} timetable entries", cleared_count=count)
