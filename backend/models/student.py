from __future__ import annotations

import uuid

from sqlalchemy import JSON, CheckConstraint, Column, DateTime, ForeignKey, Integer, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.sql import func

from models.base import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    roll_no = Column(Text, nullable=False, unique=True)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=True)
    semester = Column(Integer, nullable=False, default=1)
    department_id = Column(UUID(as_uuid=True), ForeignKey("departments.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("semester >= 1 and semester <= 8", name="ck_students_semester"),
    )


class PersonalizedTimetable(Base):
    """A generated timetable for one student, stored as the raw entry list.

    Each save adds a row; the newest ``generated_at`` is the current one.
    """

    __tablename__ = "personalized_timetables"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(
        UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True
    )
    timetable_json = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False, default=list)
    model_version = Column(Text, nullable=True)
    generated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
