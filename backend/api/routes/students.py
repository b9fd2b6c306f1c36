from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError
from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from api.deps import clean_optional_text, clean_text
from core.database import get_db
from models.department import Department
from models.student import PersonalizedTimetable, Student
from schemas.student import (
    PersonalizedEntry,
    PersonalizedTimetableCreate,
    PersonalizedTimetableOut,
    StudentCreate,
    StudentOut,
    StudentUpdate,
)
from services.generation_import import extract_json_array


logger = logging.getLogger(__name__)

router = APIRouter()


def _require_department(db: Session, department_id: uuid.UUID | None) -> None:
    if department_id is not None and db.get(Department, department_id) is None:
        raise HTTPException(status_code=404, detail="DEPARTMENT_NOT_FOUND")


def _get_student(db: Session, student_id: uuid.UUID) -> Student:
    student = db.get(Student, student_id)
    if student is None:
        raise HTTPException(status_code=404, detail="STUDENT_NOT_FOUND")
    return student


def _commit_student(db: Session, student: Student) -> Student:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="STUDENT_ROLL_NO_ALREADY_EXISTS")
    db.refresh(student)
    return student


def _entry_json(entry: PersonalizedEntry) -> dict:
    data = entry.model_dump()
    data["start_time"] = entry.start_time.strftime("%H:%M")
    data["end_time"] = entry.end_time.strftime("%H:%M")
    return data


def _parse_entries(response_text: str) -> list[PersonalizedEntry]:
    raw = extract_json_array(response_text)
    if raw is None:
        raise HTTPException(
            status_code=422,
            detail={"code": "INVALID_GENERATOR_RESPONSE", "errors": ["No JSON array found in generator response"]},
        )

    entries: list[PersonalizedEntry] = []
    for item in raw:
        try:
            entries.append(PersonalizedEntry.model_validate(item))
        except ValidationError:
            continue
    if len(entries) < len(raw):
        logger.warning("Dropped %d malformed personalized entries (of %d)", len(raw) - len(entries), len(raw))
    if not entries:
        raise HTTPException(
            status_code=422,
            detail={"code": "INVALID_GENERATOR_RESPONSE", "errors": ["No usable timetable entries in response"]},
        )
    return entries


@router.get("/", response_model=list[StudentOut])
def list_students(
    q: str | None = Query(default=None),
    department_id: uuid.UUID | None = Query(default=None),
    semester: int | None = Query(default=None, ge=1, le=8),
    db: Session = Depends(get_db),
) -> list[StudentOut]:
    query = select(Student)
    term = (q or "").strip()
    if term:
        pattern = f"%{term}%"
        query = query.where(
            or_(Student.name.ilike(pattern), Student.roll_no.ilike(pattern), Student.email.ilike(pattern))
        )
    if department_id is not None:
        query = query.where(Student.department_id == department_id)
    if semester is not None:
        query = query.where(Student.semester == semester)
    return db.execute(query.order_by(Student.name.asc())).scalars().all()


@router.post("/", response_model=StudentOut)
def create_student(payload: StudentCreate, db: Session = Depends(get_db)) -> StudentOut:
    _require_department(db, payload.department_id)
    student = Student(
        roll_no=clean_text(payload.roll_no, code="INVALID_ROLL_NO"),
        name=clean_text(payload.name, code="INVALID_NAME"),
        email=clean_optional_text(payload.email),
        semester=int(payload.semester),
        department_id=payload.department_id,
    )
    db.add(student)
    return _commit_student(db, student)


@router.get("/{student_id}", response_model=StudentOut)
def get_student(student_id: uuid.UUID, db: Session = Depends(get_db)) -> StudentOut:
    return _get_student(db, student_id)


@router.patch("/{student_id}", response_model=StudentOut)
def update_student(student_id: uuid.UUID, payload: StudentUpdate, db: Session = Depends(get_db)) -> StudentOut:
    student = _get_student(db, student_id)

    updates = payload.model_dump(exclude_unset=True)
    if "department_id" in updates:
        _require_department(db, updates["department_id"])
        student.department_id = updates["department_id"]
    if updates.get("roll_no") is not None:
        student.roll_no = clean_text(updates["roll_no"], code="INVALID_ROLL_NO")
    if updates.get("name") is not None:
        student.name = clean_text(updates["name"], code="INVALID_NAME")
    if "email" in updates:
        student.email = clean_optional_text(updates["email"])
    if updates.get("semester") is not None:
        student.semester = int(updates["semester"])

    return _commit_student(db, student)


@router.delete("/{student_id}")
def delete_student(student_id: uuid.UUID, db: Session = Depends(get_db)) -> dict:
    student = _get_student(db, student_id)
    db.execute(delete(PersonalizedTimetable).where(PersonalizedTimetable.student_id == student_id))
    db.delete(student)
    db.commit()
    return {"ok": True}


@router.get("/{student_id}/timetables", response_model=list[PersonalizedTimetableOut])
def list_personalized_timetables(
    student_id: uuid.UUID,
    db: Session = Depends(get_db),
) -> list[PersonalizedTimetableOut]:
    _get_student(db, student_id)
    q = (
        select(PersonalizedTimetable)
        .where(PersonalizedTimetable.student_id == student_id)
        .order_by(PersonalizedTimetable.generated_at.desc())
    )
    return db.execute(q).scalars().all()


@router.post("/{student_id}/timetables", response_model=PersonalizedTimetableOut)
def save_personalized_timetable(
    student_id: uuid.UUID,
    payload: PersonalizedTimetableCreate,
    db: Session = Depends(get_db),
) -> PersonalizedTimetableOut:
    _get_student(db, student_id)
    entries = payload.entries if payload.entries is not None else _parse_entries(payload.response_text)

    row = PersonalizedTimetable(
        student_id=student_id,
        timetable_json=[_entry_json(e) for e in entries],
        model_version=clean_optional_text(payload.model_version),
        generated_at=datetime.now(timezone.utc),
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("Saved personalized timetable for student %s (%d entries)", student_id, len(entries))
    return row
