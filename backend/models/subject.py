from __future__ import annotations

import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from models.base import Base


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    department_id = Column(UUID(as_uuid=True), ForeignKey("departments.id", ondelete="CASCADE"), nullable=False)
    code = Column(Text, nullable=False)
    name = Column(Text, nullable=False)
    semester = Column(Integer, nullable=False)
    # THEORY / LAB / ELECTIVE; free text in the upstream schema.
    subject_type = Column(Text, nullable=False, default="THEORY")
    credits = Column(Integer, nullable=False, default=3)
    hours_per_week = Column(Integer, nullable=False, default=3)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("credits >= 0", name="ck_subjects_credits"),
        CheckConstraint("hours_per_week >= 0", name="ck_subjects_hours_per_week"),
    )
