from __future__ import annotations

import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from models.base import Base


class Room(Base):
    __tablename__ = "rooms"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    room_number = Column(Text, nullable=False)
    room_type = Column(Text, nullable=False, default="CLASSROOM")
    capacity = Column(Integer, nullable=False, default=0)
    building = Column(Text, nullable=True)
    floor = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("capacity >= 0", name="ck_rooms_capacity"),
        UniqueConstraint("room_number", name="uq_rooms_room_number"),
    )
