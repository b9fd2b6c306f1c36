from __future__ import annotations

import uuid
from collections import defaultdict

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from api.deps import clean_optional_text, clean_text
from core.database import get_db
from models.department import Department
from models.staff import Staff, StaffSubject
from models.subject import Subject
from schemas.staff import StaffCreate, StaffOut, StaffSubjectsPut, StaffUpdate


router = APIRouter()


def _subject_ids_by_staff(db: Session, staff_ids: list[uuid.UUID]) -> dict[uuid.UUID, list[uuid.UUID]]:
    out: dict[uuid.UUID, list[uuid.UUID]] = defaultdict(list)
    if not staff_ids:
        return out
    rows = db.execute(
        select(StaffSubject.staff_id, StaffSubject.subject_id).where(StaffSubject.staff_id.in_(staff_ids))
    ).all()
    for staff_id, subject_id in rows:
        out[staff_id].append(subject_id)
    return out


def _to_out(staff: Staff, subject_ids: list[uuid.UUID]) -> StaffOut:
    return StaffOut(
        id=staff.id,
        department_id=staff.department_id,
        name=staff.name,
        designation=staff.designation,
        email=staff.email,
        phone=staff.phone,
        max_hours_per_week=int(staff.max_hours_per_week),
        created_at=staff.created_at,
        subject_ids=sorted(subject_ids, key=str),
    )


def _replace_subjects(db: Session, staff_id: uuid.UUID, subject_ids: list[uuid.UUID]) -> list[uuid.UUID]:
    wanted = list(dict.fromkeys(subject_ids))
    if wanted:
        found = set(db.execute(select(Subject.id).where(Subject.id.in_(wanted))).scalars().all())
        missing = [str(s) for s in wanted if s not in found]
        if missing:
            raise HTTPException(status_code=404, detail={"code": "SUBJECT_NOT_FOUND", "errors": missing})

    db.execute(delete(StaffSubject).where(StaffSubject.staff_id == staff_id))
    db.add_all(StaffSubject(staff_id=staff_id, subject_id=s) for s in wanted)
    return wanted


@router.get("/", response_model=list[StaffOut])
def list_staff(
    department_id: uuid.UUID | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[StaffOut]:
    q = select(Staff)
    if department_id is not None:
        q = q.where(Staff.department_id == department_id)
    rows = db.execute(q.order_by(Staff.name.asc())).scalars().all()
    links = _subject_ids_by_staff(db, [s.id for s in rows])
    return [_to_out(s, links.get(s.id, [])) for s in rows]


@router.post("/", response_model=StaffOut)
def create_staff(payload: StaffCreate, db: Session = Depends(get_db)) -> StaffOut:
    if db.get(Department, payload.department_id) is None:
        raise HTTPException(status_code=404, detail="DEPARTMENT_NOT_FOUND")

    staff = Staff(
        department_id=payload.department_id,
        name=clean_text(payload.name, code="INVALID_NAME"),
        designation=clean_text(payload.designation, code="INVALID_DESIGNATION"),
        email=clean_optional_text(payload.email),
        phone=clean_optional_text(payload.phone),
        max_hours_per_week=int(payload.max_hours_per_week),
    )
    db.add(staff)
    try:
        db.flush()
        subject_ids = _replace_subjects(db, staff.id, payload.subject_ids)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="CONFLICT")
    db.refresh(staff)
    return _to_out(staff, subject_ids)


@router.patch("/{staff_id}", response_model=StaffOut)
def update_staff(staff_id: uuid.UUID, payload: StaffUpdate, db: Session = Depends(get_db)) -> StaffOut:
    staff = db.get(Staff, staff_id)
    if staff is None:
        raise HTTPException(status_code=404, detail="STAFF_NOT_FOUND")

    updates = payload.model_dump(exclude_unset=True)
    if updates.get("department_id") is not None:
        if db.get(Department, updates["department_id"]) is None:
            raise HTTPException(status_code=404, detail="DEPARTMENT_NOT_FOUND")
        staff.department_id = updates["department_id"]
    if updates.get("name") is not None:
        staff.name = clean_text(updates["name"], code="INVALID_NAME")
    if updates.get("designation") is not None:
        staff.designation = clean_text(updates["designation"], code="INVALID_DESIGNATION")
    if "email" in updates:
        staff.email = clean_optional_text(updates["email"])
    if "phone" in updates:
        staff.phone = clean_optional_text(updates["phone"])
    if updates.get("max_hours_per_week") is not None:
        staff.max_hours_per_week = int(updates["max_hours_per_week"])

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="CONFLICT")
    db.refresh(staff)
    return _to_out(staff, _subject_ids_by_staff(db, [staff.id]).get(staff.id, []))


@router.put("/{staff_id}/subjects", response_model=StaffOut)
def put_staff_subjects(staff_id: uuid.UUID, payload: StaffSubjectsPut, db: Session = Depends(get_db)) -> StaffOut:
    staff = db.get(Staff, staff_id)
    if staff is None:
        raise HTTPException(status_code=404, detail="STAFF_NOT_FOUND")

    subject_ids = _replace_subjects(db, staff.id, payload.subject_ids)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="CONFLICT")
    db.refresh(staff)
    return _to_out(staff, subject_ids)


@router.delete("/{staff_id}")
def delete_staff(staff_id: uuid.UUID, db: Session = Depends(get_db)) -> dict:
    staff = db.get(Staff, staff_id)
    if staff is None:
        raise HTTPException(status_code=404, detail="STAFF_NOT_FOUND")
    db.execute(delete(StaffSubject).where(StaffSubject.staff_id == staff_id))
    db.delete(staff)
    db.commit()
    return {"ok": True}
