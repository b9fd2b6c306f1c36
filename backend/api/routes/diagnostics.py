from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from api.deps import get_store
from schemas.diagnostics import ClearOut, ConflictGroupOut, ConflictScanOut, DiagnosticOut, IntegrityOut
from services.datastore import DiagnosticStore
from services.diagnostics import check_data_integrity, check_timetable_constraints, clear_all_assignments, run_full_diagnostic
from services.integrity import LINK_TABLE


router = APIRouter()


@router.get("/", response_model=DiagnosticOut)
def full_diagnostic(store: DiagnosticStore = Depends(get_store)) -> DiagnosticOut:
    result = run_full_diagnostic(store)
    return DiagnosticOut(
        success=result.success,
        healthy=result.healthy,
        report=result.report,
        issues=result.issues,
        recommendations=result.recommendations,
        data=result.data,
    )


@router.get("/conflicts", response_model=ConflictScanOut)
def conflict_scan(store: DiagnosticStore = Depends(get_store)) -> ConflictScanOut:
    report, error = check_timetable_constraints(store)
    if report is None:
        raise HTTPException(
            status_code=503,
            detail={"code": "TIMETABLES_UNAVAILABLE", "errors": [f"Failed to fetch existing timetables: {error}"]},
        )
    return ConflictScanOut(
        success=report.success,
        total_entries=report.total_entries,
        staff_conflicts=report.staff_conflicts,
        room_conflicts=report.room_conflicts,
        section_conflicts=report.section_conflicts,
        issues=report.issues,
        recommendations=report.recommendations,
        groups=[
            ConflictGroupOut(
                kind=g.kind,
                resource_id=str(g.key[0]),
                day_of_week=g.key[1],
                time_slot=g.key[2],
                count=g.count,
                entry_ids=[str(e.get("id")) for e in g.entries],
            )
            for g in report.groups
        ],
    )


@router.get("/integrity", response_model=IntegrityOut)
def integrity_check(store: DiagnosticStore = Depends(get_store)) -> IntegrityOut:
    report = check_data_integrity(store)
    return IntegrityOut(
        success=report.success,
        issues=report.issues,
        recommendations=report.recommendations,
        counts=report.counts,
        staff_subjects=report.counts.get(LINK_TABLE, 0),
        reachable=report.reachable,
    )


@router.post("/clear-timetables", response_model=ClearOut)
def clear_timetables(
    confirm: bool = Query(default=False),
    store: DiagnosticStore = Depends(get_store),
) -> ClearOut:
    if not confirm:
        raise HTTPException(
            status_code=400,
            detail={
                "code": "CONFIRM_REQUIRED",
                "errors": ["Deletes every timetable entry. Retry with ?confirm=true to proceed."],
            },
        )
    result = clear_all_assignments(store)
    if not result.success:
        raise HTTPException(status_code=500, detail={"code": "CLEAR_FAILED", "errors": [result.message]})
    return ClearOut(success=result.success, message=result.message, cleared_count=result.cleared_count)
