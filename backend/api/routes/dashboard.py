from __future__ import annotations

from fastapi import APIRouter, Depends

from api.deps import get_store
from schemas.diagnostics import DashboardStatsOut
from services.datastore import DiagnosticStore
from services.integrity import LINK_TABLE, REQUIRED_TABLES


router = APIRouter()


@router.get("/stats", response_model=DashboardStatsOut)
def dashboard_stats(store: DiagnosticStore = Depends(get_store)) -> DashboardStatsOut:
    counts = {table: store.count_rows(table) for table in (*REQUIRED_TABLES, LINK_TABLE, "students")}
    return DashboardStatsOut(counts=counts, timetable_entries=store.count_rows("timetables"))
