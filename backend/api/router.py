from __future__ import annotations

from fastapi import APIRouter

from api.routes import (
    college_timings,
    dashboard,
    departments,
    diagnostics,
    rooms,
    sections,
    staff,
    students,
    subjects,
    timetables,
)


api_router = APIRouter()
api_router.include_router(departments.router, prefix="/departments", tags=["departments"])
api_router.include_router(sections.router, prefix="/sections", tags=["sections"])
api_router.include_router(subjects.router, prefix="/subjects", tags=["subjects"])
api_router.include_router(staff.router, prefix="/staff", tags=["staff"])
api_router.include_router(rooms.router, prefix="/rooms", tags=["rooms"])
api_router.include_router(students.router, prefix="/students", tags=["students"])
api_router.include_router(college_timings.router, prefix="/college-timings", tags=["college-timings"])
api_router.include_router(timetables.router, prefix="/timetables", tags=["timetables"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(diagnostics.router, prefix="/diagnostics", tags=["diagnostics"])
