from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class StaffBase(BaseModel):
    department_id: uuid.UUID
    name: str = Field(min_length=1)
    designation: str = Field(min_length=1)
    email: str | None = None
    phone: str | None = None
    max_hours_per_week: int = Field(default=20, ge=0)


class StaffCreate(StaffBase):
    subject_ids: list[uuid.UUID] = Field(default_factory=list)


class StaffUpdate(BaseModel):
    department_id: uuid.UUID | None = None
    name: str | None = None
    designation: str | None = None
    email: str | None = None
    phone: str | None = None
    max_hours_per_week: int | None = Field(default=None, ge=0)


class StaffSubjectsPut(BaseModel):
    subject_ids: list[uuid.UUID] = Field(default_factory=list)


class StaffOut(StaffBase):
    id: uuid.UUID
    created_at: datetime
    subject_ids: list[uuid.UUID] = Field(default_factory=list)

    class Config:
        from_attributes = True
