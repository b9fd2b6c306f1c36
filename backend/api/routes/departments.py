from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from api.deps import clean_text
from core.database import get_db
from models.department import Department
from models.section import Section
from schemas.department import DepartmentCreate, DepartmentOut, DepartmentUpdate


router = APIRouter()


@router.get("/", response_model=list[DepartmentOut])
def list_departments(db: Session = Depends(get_db)) -> list[DepartmentOut]:
    return db.execute(select(Department).order_by(Department.code.asc())).scalars().all()


@router.post("/", response_model=DepartmentOut)
def create_department(payload: DepartmentCreate, db: Session = Depends(get_db)) -> DepartmentOut:
    dept = Department(
        code=clean_text(payload.code, code="INVALID_CODE").upper(),
        name=clean_text(payload.name, code="INVALID_NAME"),
    )
    db.add(dept)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="DEPARTMENT_CODE_ALREADY_EXISTS")
    db.refresh(dept)
    return dept


@router.patch("/{department_id}", response_model=DepartmentOut)
def update_department(
    department_id: uuid.UUID,
    payload: DepartmentUpdate,
    db: Session = Depends(get_db),
) -> DepartmentOut:
    dept = db.get(Department, department_id)
    if dept is None:
        raise HTTPException(status_code=404, detail="DEPARTMENT_NOT_FOUND")

    updates = payload.model_dump(exclude_unset=True)
    if updates.get("code") is not None:
        dept.code = clean_text(updates["code"], code="INVALID_CODE").upper()
    if updates.get("name") is not None:
        dept.name = clean_text(updates["name"], code="INVALID_NAME")

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="DEPARTMENT_CODE_ALREADY_EXISTS")
    db.refresh(dept)
    return dept


@router.delete("/{department_id}")
def delete_department(department_id: uuid.UUID, db: Session = Depends(get_db)) -> dict:
    dept = db.get(Department, department_id)
    if dept is None:
        raise HTTPException(status_code=404, detail="DEPARTMENT_NOT_FOUND")

    n_sections = db.execute(
        select(func.count()).select_from(Section).where(Section.department_id == department_id)
    ).scalar_one()
    if n_sections:
        raise HTTPException(
            status_code=409,
            detail={
                "code": "DEPARTMENT_IN_USE",
                "errors": [f"Department still has {n_sections} section(s)."],
            },
        )
    db.delete(dept)
    db.commit()
    return {"ok": True}
