from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from api.deps import clean_text
from core.database import get_db
from models.department import Department
from models.subject import Subject
from schemas.subject import SubjectCreate, SubjectOut, SubjectUpdate


router = APIRouter()


@router.get("/", response_model=list[SubjectOut])
def list_subjects(
    department_id: uuid.UUID | None = Query(default=None),
    semester: int | None = Query(default=None, ge=1, le=8),
    db: Session = Depends(get_db),
) -> list[SubjectOut]:
    q = select(Subject)
    if department_id is not None:
        q = q.where(Subject.department_id == department_id)
    if semester is not None:
        q = q.where(Subject.semester == semester)
    return db.execute(q.order_by(Subject.code.asc())).scalars().all()


@router.post("/", response_model=SubjectOut)
def create_subject(payload: SubjectCreate, db: Session = Depends(get_db)) -> SubjectOut:
    if db.get(Department, payload.department_id) is None:
        raise HTTPException(status_code=404, detail="DEPARTMENT_NOT_FOUND")

    data = payload.model_dump()
    data["code"] = clean_text(data["code"], code="INVALID_CODE").upper()
    data["name"] = clean_text(data["name"], code="INVALID_NAME")
    data["subject_type"] = clean_text(data["subject_type"], code="INVALID_SUBJECT_TYPE").upper()

    subject = Subject(**data)
    db.add(subject)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="CONFLICT")
    db.refresh(subject)
    return subject


@router.patch("/{subject_id}", response_model=SubjectOut)
def update_subject(subject_id: uuid.UUID, payload: SubjectUpdate, db: Session = Depends(get_db)) -> SubjectOut:
    subject = db.get(Subject, subject_id)
    if subject is None:
        raise HTTPException(status_code=404, detail="SUBJECT_NOT_FOUND")

    updates = payload.model_dump(exclude_unset=True)
    if updates.get("department_id") is not None and db.get(Department, updates["department_id"]) is None:
        raise HTTPException(status_code=404, detail="DEPARTMENT_NOT_FOUND")
    if updates.get("code") is not None:
        updates["code"] = clean_text(updates["code"], code="INVALID_CODE").upper()
    if updates.get("name") is not None:
        updates["name"] = clean_text(updates["name"], code="INVALID_NAME")
    if updates.get("subject_type") is not None:
        updates["subject_type"] = clean_text(updates["subject_type"], code="INVALID_SUBJECT_TYPE").upper()

    for k, v in updates.items():
        if v is not None:
            setattr(subject, k, v)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="CONFLICT")
    db.refresh(subject)
    return subject


@router.delete("/{subject_id}")
def delete_subject(subject_id: uuid.UUID, db: Session = Depends(get_db)) -> dict:
    subject = db.get(Subject, subject_id)
    if subject is None:
        raise HTTPException(status_code=404, detail="SUBJECT_NOT_FOUND")
    db.delete(subject)
    db.commit()
    return {"ok": True}
