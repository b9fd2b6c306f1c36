from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class DiagnosticOut(BaseModel):
    success: bool
    healthy: bool
    report: str
    issues: list[str]
    recommendations: list[str]
    data: dict[str, Any]


class ConflictGroupOut(BaseModel):
    kind: str
    resource_id: str
    day_of_week: int
    time_slot: int
    count: int
    entry_ids: list[str]


class ConflictScanOut(BaseModel):
    success: bool
    total_entries: int
    staff_conflicts: int
    room_conflicts: int
    section_conflicts: int
    issues: list[str]
    recommendations: list[str]
    groups: list[ConflictGroupOut]


class IntegrityOut(BaseModel):
    success: bool
    issues: list[str]
    recommendations: list[str]
    counts: dict[str, int]
    staff_subjects: int
    reachable: dict[str, bool]


class ClearOut(BaseModel):
    success: bool
    message: str
    cleared_count: int


class DashboardStatsOut(BaseModel):
    counts: dict[str, int]
    timetable_entries: int
