from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class SubjectBase(BaseModel):
    department_id: uuid.UUID
    code: str = Field(min_length=1)
    name: str = Field(min_length=1)
    semester: int = Field(ge=1, le=8)
    subject_type: str = Field(default="THEORY", min_length=1)
    credits: int = Field(default=3, ge=0)
    hours_per_week: int = Field(default=3, ge=0)


class SubjectCreate(SubjectBase):
    pass


class SubjectUpdate(BaseModel):
    department_id: uuid.UUID | None = None
    code: str | None = None
    name: str | None = None
    semester: int | None = Field(default=None, ge=1, le=8)
    subject_type: str | None = None
    credits: int | None = Field(default=None, ge=0)
    hours_per_week: int | None = Field(default=None, ge=0)


class SubjectOut(SubjectBase):
    id: uuid.UUID
    created_at: datetime

    class Config:
        from_attributes = True
