from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class SectionBase(BaseModel):
    department_id: uuid.UUID
    name: str = Field(min_length=1)
    semester: int = Field(ge=1, le=8)


class SectionCreate(SectionBase):
    pass


class SectionUpdate(BaseModel):
    department_id: uuid.UUID | None = None
    name: str | None = None
    semester: int | None = Field(default=None, ge=1, le=8)


class SectionOut(SectionBase):
    id: uuid.UUID
    created_at: datetime

    class Config:
        from_attributes = True
