from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence


REQUIRED_TABLES: tuple[str, ...] = (
    "departments",
    "sections",
    "subjects",
    "staff",
    "rooms",
    "college_timings",
)
LINK_TABLE = "staff_subjects"

# A snapshot value is the rows read from a table, its row count, or the error raised while reading it.
TableSnapshot = Mapping[str, "Sequence[Any] | int | BaseException"]


class TableNotLoadedError(LookupError):
    """The table was never read into the snapshot."""


@dataclass
class IntegrityReport:
    issues: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    counts: dict[str, int] = field(default_factory=dict)
    reachable: dict[str, bool] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.issues


def _read(snapshot: TableSnapshot, table: str) -> Sequence[Any] | int | BaseException:
    if table not in snapshot:
        return TableNotLoadedError(f"{table} was not loaded")
    return snapshot[table]


def check_integrity(snapshot: TableSnapshot) -> IntegrityReport:
    """Verify every reference table and the staff-subject link table holds data.

    Access errors are recorded as issues and the remaining tables are still
    checked. Nothing here raises for bad data; emptiness is reported, not thrown.
    """

    report = IntegrityReport()

    for table in (*REQUIRED_TABLES, LINK_TABLE):
        value = _read(snapshot, table)
        if isinstance(value, BaseException):
            report.issues.append(f"Error accessing {table}: {value}")
            report.reachable[table] = False
            report.counts[table] = 0
            continue

        report.reachable[table] = True
        report.counts[table] = value if isinstance(value, int) else len(value)
        if report.counts[table]:
            continue

        if table == LINK_TABLE:
            report.issues.append("No staff-subject relationships found")
            report.recommendations.append("Assign subjects to staff members in the staff management page")
        else:
            report.issues.append(f"No data found in {table} table")
            report.recommendations.append(f"Add data to {table} table before generating timetables")

    return report
