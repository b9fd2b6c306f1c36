from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from api.deps import clean_text
from core.database import get_db
from models.department import Department
from models.section import Section
from models.timetable import Timetable
from schemas.section import SectionCreate, SectionOut, SectionUpdate


router = APIRouter()


def _require_department(db: Session, department_id: uuid.UUID) -> None:
    if db.get(Department, department_id) is None:
        raise HTTPException(status_code=404, detail="DEPARTMENT_NOT_FOUND")


@router.get("/", response_model=list[SectionOut])
def list_sections(
    department_id: uuid.UUID | None = Query(default=None),
    semester: int | None = Query(default=None, ge=1, le=8),
    db: Session = Depends(get_db),
) -> list[SectionOut]:
    q = select(Section)
    if department_id is not None:
        q = q.where(Section.department_id == department_id)
    if semester is not None:
        q = q.where(Section.semester == semester)
    return db.execute(q.order_by(Section.semester.asc(), Section.name.asc())).scalars().all()


@router.post("/", response_model=SectionOut)
def create_section(payload: SectionCreate, db: Session = Depends(get_db)) -> SectionOut:
    _require_department(db, payload.department_id)
    section = Section(
        department_id=payload.department_id,
        name=clean_text(payload.name, code="INVALID_NAME"),
        semester=int(payload.semester),
    )
    db.add(section)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="CONFLICT")
    db.refresh(section)
    return section


@router.patch("/{section_id}", response_model=SectionOut)
def update_section(section_id: uuid.UUID, payload: SectionUpdate, db: Session = Depends(get_db)) -> SectionOut:
    section = db.get(Section, section_id)
    if section is None:
        raise HTTPException(status_code=404, detail="SECTION_NOT_FOUND")

    updates = payload.model_dump(exclude_unset=True)
    if updates.get("department_id") is not None:
        _require_department(db, updates["department_id"])
        section.department_id = updates["department_id"]
    if updates.get("name") is not None:
        section.name = clean_text(updates["name"], code="INVALID_NAME")
    if updates.get("semester") is not None:
        section.semester = int(updates["semester"])

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="CONFLICT")
    db.refresh(section)
    return section


@router.delete("/{section_id}")
def delete_section(section_id: uuid.UUID, db: Session = Depends(get_db)) -> dict:
    section = db.get(Section, section_id)
    if section is None:
        raise HTTPException(status_code=404, detail="SECTION_NOT_FOUND")
    db.execute(delete(Timetable).where(Timetable.section_id == section_id))
    db.delete(section)
    db.commit()
    return {"ok": True}
