from __future__ import annotations

import uuid
from datetime import datetime, time
from typing import Literal

from pydantic import BaseModel, Field, model_validator


class StudentBase(BaseModel):
    roll_no: str = Field(min_length=1)
    name: str = Field(min_length=1)
    email: str | None = None
    semester: int = Field(default=1, ge=1, le=8)
    department_id: uuid.UUID | None = None


class StudentCreate(StudentBase):
    pass


class StudentUpdate(BaseModel):
    roll_no: str | None = None
    name: str | None = None
    email: str | None = None
    semester: int | None = Field(default=None, ge=1, le=8)
    department_id: uuid.UUID | None = None


class StudentOut(StudentBase):
    id: uuid.UUID
    created_at: datetime

    class Config:
        from_attributes = True


class PersonalizedEntry(BaseModel):
    day: Literal["Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
    start_time: time
    end_time: time
    subject_code: str | None = None
    subject_name: str | None = None
    faculty_name: str | None = None
    room: str = "TBD"

    @model_validator(mode="after")
    def _check_order(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class PersonalizedTimetableCreate(BaseModel):
    """Either ready-made ``entries`` or a raw generator ``response_text`` to parse them from."""

    entries: list[PersonalizedEntry] | None = None
    response_text: str | None = None
    model_version: str | None = None

    @model_validator(mode="after")
    def _one_source(self):
        if (self.entries is None) == (self.response_text is None):
            raise ValueError("Provide exactly one of entries or response_text")
        return self


class PersonalizedTimetableOut(BaseModel):
    id: uuid.UUID
    student_id: uuid.UUID
    timetable_json: list[dict]
    model_version: str | None
    generated_at: datetime

    class Config:
        from_attributes = True
