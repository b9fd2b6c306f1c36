from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import get_db
from models.room import Room
from models.section import Section
from models.staff import Staff
from models.subject import Subject
from models.timetable import Timetable
from schemas.timetable import (
    GeneratedTimetableImport,
    GeneratedTimetableImportOut,
    TimetableEntryOut,
    TimetableGridEntryOut,
)
from services.generation_import import GenerationParseError, import_generated_assignments


router = APIRouter()


@router.get("/", response_model=list[TimetableEntryOut])
def list_timetable_entries(
    section_id: uuid.UUID | None = Query(default=None),
    semester: int | None = Query(default=None, ge=1, le=8),
    db: Session = Depends(get_db),
) -> list[TimetableEntryOut]:
    q = select(Timetable)
    if section_id is not None:
        q = q.where(Timetable.section_id == section_id)
    if semester is not None:
        q = q.where(Timetable.semester == semester)
    q = q.order_by(Timetable.section_id, Timetable.day_of_week, Timetable.time_slot)
    return db.execute(q).scalars().all()


@router.get("/section/{section_id}", response_model=list[TimetableGridEntryOut])
def get_section_timetable(section_id: uuid.UUID, db: Session = Depends(get_db)) -> list[TimetableGridEntryOut]:
    if db.get(Section, section_id) is None:
        raise HTTPException(status_code=404, detail="SECTION_NOT_FOUND")

    q = (
        select(
            Timetable.day_of_week.label("day_of_week"),
            Timetable.time_slot.label("time_slot"),
            Section.name.label("section_name"),
            Subject.code.label("subject_code"),
            Subject.name.label("subject_name"),
            Staff.name.label("staff_name"),
            Room.room_number.label("room_number"),
        )
        .select_from(Timetable)
        .join(Section, Section.id == Timetable.section_id)
        .join(Subject, Subject.id == Timetable.subject_id)
        .join(Staff, Staff.id == Timetable.staff_id)
        .join(Room, Room.id == Timetable.room_id)
        .where(Timetable.section_id == section_id)
        .order_by(Timetable.day_of_week, Timetable.time_slot)
    )
    return [
        TimetableGridEntryOut(
            day_of_week=int(r.day_of_week),
            time_slot=int(r.time_slot),
            section_name=str(r.section_name),
            subject_code=str(r.subject_code),
            subject_name=str(r.subject_name),
            staff_name=str(r.staff_name),
            room_number=str(r.room_number),
        )
        for r in db.execute(q).all()
    ]


@router.post("/import", response_model=GeneratedTimetableImportOut)
def import_generated_timetable(
    payload: GeneratedTimetableImport,
    db: Session = Depends(get_db),
) -> GeneratedTimetableImportOut:
    try:
        result = import_generated_assignments(db, payload.response_text, semester=payload.semester)
    except GenerationParseError as exc:
        raise HTTPException(status_code=422, detail={"code": "INVALID_GENERATOR_RESPONSE", "errors": [str(exc)]})
    except IntegrityError:
        raise HTTPException(
            status_code=409,
            detail={"code": "INVALID_REFERENCES", "errors": ["Generated entries reference rows that no longer exist."]},
        )
    return GeneratedTimetableImportOut(
        accepted=result.accepted,
        rejected_invalid=result.rejected_invalid,
        rejected_conflicts=result.rejected_conflicts,
        replaced=result.replaced,
        section_ids=result.section_ids,
    )
