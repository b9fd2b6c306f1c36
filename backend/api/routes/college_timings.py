from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from core.database import get_db
from models.college_timing import CollegeTiming
from schemas.college_timing import CollegeTimingCreate, CollegeTimingOut


router = APIRouter()


@router.get("/", response_model=list[CollegeTimingOut])
def list_college_timings(db: Session = Depends(get_db)) -> list[CollegeTimingOut]:
    return db.execute(select(CollegeTiming).order_by(CollegeTiming.day_of_week.asc())).scalars().all()


@router.put("/{day_of_week}", response_model=CollegeTimingOut)
def put_college_timing(day_of_week: int, payload: CollegeTimingCreate, db: Session = Depends(get_db)) -> CollegeTimingOut:
    """Create or replace the timing for one day (one row per day)."""

    if payload.day_of_week != day_of_week:
        raise HTTPException(status_code=400, detail="DAY_OF_WEEK_MISMATCH")

    timing = db.execute(select(CollegeTiming).where(CollegeTiming.day_of_week == day_of_week)).scalars().first()
    if timing is None:
        timing = CollegeTiming(**payload.model_dump())
        db.add(timing)
    else:
        for k, v in payload.model_dump().items():
            setattr(timing, k, v)
    db.commit()
    db.refresh(timing)
    return timing


@router.delete("/{timing_id}")
def delete_college_timing(timing_id: uuid.UUID, db: Session = Depends(get_db)) -> dict:
    timing = db.get(CollegeTiming, timing_id)
    if timing is None:
        raise HTTPException(status_code=404, detail="TIMING_NOT_FOUND")
    db.delete(timing)
    db.commit()
    return {"ok": True}
