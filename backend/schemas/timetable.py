from __future__ import annotations

import uuid

from pydantic import BaseModel, Field


class TimetableEntryOut(BaseModel):
    id: uuid.UUID
    section_id: uuid.UUID
    subject_id: uuid.UUID
    staff_id: uuid.UUID
    room_id: uuid.UUID
    day_of_week: int
    time_slot: int
    semester: int

    class Config:
        from_attributes = True


class TimetableGridEntryOut(BaseModel):
    day_of_week: int
    time_slot: int

    section_name: str
    subject_code: str
    subject_name: str
    staff_name: str
    room_number: str


class GeneratedTimetableImport(BaseModel):
    response_text: str = Field(min_length=1)
    semester: int = Field(ge=1, le=8)


class GeneratedTimetableImportOut(BaseModel):
    accepted: int
    rejected_invalid: int
    rejected_conflicts: int
    replaced: int
    section_ids: list[uuid.UUID]
