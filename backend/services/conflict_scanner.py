from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping


# (resource_id, day_of_week, time_slot)
CompositeKey = tuple[Any, int, int]

RESOURCE_KINDS: tuple[str, ...] = ("staff", "room", "section")

_KIND_FIELDS: dict[str, str] = {
    "staff": "staff_id",
    "room": "room_id",
    "section": "section_id",
}


def _field(entry: Any, name: str) -> Any:
    if isinstance(entry, Mapping):
        return entry.get(name)
    return getattr(entry, name, None)


def format_key(key: CompositeKey) -> str:
    resource_id, day, slot = key
    return f"{resource_id}:{day}:{slot}"


@dataclass(frozen=True)
class ConflictGroup:
    kind: str
    key: CompositeKey
    entries: tuple[Any, ...]

    @property
    def count(self) -> int:
        return len(self.entries)

    @property
    def message(self) -> str:
        return f"{self.kind.capitalize()} conflict at {format_key(self.key)}: {self.count} entries"


@dataclass
class ConflictReport:
    total_entries: int = 0
    groups: list[ConflictGroup] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    def count_for(self, kind: str) -> int:
        return sum(1 for g in self.groups if g.kind == kind)

    @property
    def staff_conflicts(self) -> int:
        return self.count_for("staff")

    @property
    def room_conflicts(self) -> int:
        return self.count_for("room")

    @property
    def section_conflicts(self) -> int:
        return self.count_for("section")

    @property
    def success(self) -> bool:
        return not self.groups

    def summary(self) -> dict[str, int]:
        return {
            "staff_conflicts": self.staff_conflicts,
            "room_conflicts": self.room_conflicts,
            "section_conflicts": self.section_conflicts,
        }


def group_by_resource(assignments: Iterable[Any], kind: str) -> dict[CompositeKey, list[Any]]:
    """Bucket assignments by (resource_id, day_of_week, time_slot) for one resource kind."""

    id_field = _KIND_FIELDS[kind]
    buckets: dict[CompositeKey, list[Any]] = defaultdict(list)
    for entry in assignments:
        key = (_field(entry, id_field), int(_field(entry, "day_of_week")), int(_field(entry, "time_slot")))
        buckets[key].append(entry)
    return buckets


def scan(assignments: Iterable[Any]) -> ConflictReport:
    """Report every staff/room/section that is booked more than once in the same day and slot.

    Accepts ORM rows, dicts or any object exposing ``staff_id``, ``room_id``,
    ``section_id``, ``day_of_week`` and ``time_slot``. Conflicts are counted per
    offending key, not per excess row: three entries in one room at one slot
    are a single room conflict with three entries.
    """

    entries = list(assignments)
    report = ConflictReport(total_entries=len(entries))

    for kind in RESOURCE_KINDS:
        for key, bucket in group_by_resource(entries, kind).items():
            if len(bucket) > 1:
                group = ConflictGroup(kind=kind, key=key, entries=tuple(bucket))
                report.groups.append(group)
                report.issues.append(group.message)

    for kind in RESOURCE_KINDS:
        n = report.count_for(kind)
        if n > 0:
            report.recommendations.append(
                f"Clear existing timetables before generating new ones to resolve {n} {kind} conflicts"
            )

    return report
