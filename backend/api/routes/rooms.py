from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from api.deps import clean_optional_text, clean_text
from core.database import get_db
from models.room import Room
from models.timetable import Timetable
from schemas.room import RoomCreate, RoomOut, RoomUpdate


logger = logging.getLogger(__name__)


router = APIRouter()


def _ensure_unique_room_number(db: Session, *, room_number: str, exclude_room_id: uuid.UUID | None) -> None:
    q = select(Room.id).where(Room.room_number == room_number)
    if exclude_room_id is not None:
        q = q.where(Room.id != exclude_room_id)
    if db.execute(q.limit(1)).first() is not None:
        raise HTTPException(status_code=409, detail="ROOM_NUMBER_ALREADY_EXISTS")


def _scheduled_count(db: Session, room_id: uuid.UUID) -> int:
    return int(
        db.execute(select(func.count()).select_from(Timetable).where(Timetable.room_id == room_id)).scalar_one()
    )


@router.get("/", response_model=list[RoomOut])
def list_rooms(db: Session = Depends(get_db)) -> list[RoomOut]:
    return db.execute(select(Room).order_by(Room.room_number.asc())).scalars().all()


@router.post("/", response_model=RoomOut)
def create_room(payload: RoomCreate, db: Session = Depends(get_db)) -> RoomOut:
    data = payload.model_dump()
    data["room_number"] = clean_text(data["room_number"], code="INVALID_ROOM_NUMBER")
    data["room_type"] = clean_text(data["room_type"], code="INVALID_ROOM_TYPE").upper()
    data["building"] = clean_optional_text(data.get("building"))

    _ensure_unique_room_number(db, room_number=data["room_number"], exclude_room_id=None)

    room = Room(**data)
    db.add(room)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="ROOM_NUMBER_ALREADY_EXISTS")
    db.refresh(room)
    return room


@router.patch("/{room_id}", response_model=RoomOut)
def update_room(room_id: uuid.UUID, payload: RoomUpdate, db: Session = Depends(get_db)) -> RoomOut:
    room = db.get(Room, room_id)
    if room is None:
        raise HTTPException(status_code=404, detail="ROOM_NOT_FOUND")

    updates = payload.model_dump(exclude_unset=True)
    if updates.get("room_number") is not None:
        updates["room_number"] = clean_text(updates["room_number"], code="INVALID_ROOM_NUMBER")
        _ensure_unique_room_number(db, room_number=updates["room_number"], exclude_room_id=room_id)
    if updates.get("room_type") is not None:
        updates["room_type"] = clean_text(updates["room_type"], code="INVALID_ROOM_TYPE").upper()
        if updates["room_type"] != str(room.room_type) and _scheduled_count(db, room_id):
            logger.warning(
                "Room type changed for room_id=%s (room_number=%s) but room is referenced by timetable entries",
                str(room_id),
                str(room.room_number),
            )
    if "building" in updates:
        updates["building"] = clean_optional_text(updates["building"])

    for k, v in updates.items():
        setattr(room, k, v)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="CONFLICT")
    db.refresh(room)
    return room


@router.delete("/{room_id}")
def delete_room(
    room_id: uuid.UUID,
    force: bool = Query(default=False),
    db: Session = Depends(get_db),
) -> dict:
    room = db.get(Room, room_id)
    if room is None:
        raise HTTPException(status_code=404, detail="ROOM_NOT_FOUND")

    scheduled = _scheduled_count(db, room_id)
    if scheduled and not force:
        raise HTTPException(
            status_code=409,
            detail={
                "code": "ROOM_IN_USE_CONFIRM_REQUIRED",
                "errors": [
                    f"Room is referenced by {scheduled} timetable entries.",
                    "Retry with ?force=true to delete the room and its entries.",
                ],
            },
        )
    if scheduled:
        db.execute(delete(Timetable).where(Timetable.room_id == room_id))
    db.delete(room)
    db.commit()
    return {"ok": True}
