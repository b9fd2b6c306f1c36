from __future__ import annotations

import uuid
from datetime import datetime, time

from pydantic import BaseModel, Field, model_validator


class CollegeTimingBase(BaseModel):
    day_of_week: int = Field(ge=1, le=6)
    start_time: time
    end_time: time
    break_start: time | None = None
    break_end: time | None = None
    lunch_start: time | None = None
    lunch_end: time | None = None

    @model_validator(mode="after")
    def _check_order(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        for start, end, label in (
            (self.break_start, self.break_end, "break"),
            (self.lunch_start, self.lunch_end, "lunch"),
        ):
            if (start is None) != (end is None):
                raise ValueError(f"{label}_start and {label}_end must be set together")
            if start is not None and not (self.start_time <= start < end <= self.end_time):
                raise ValueError(f"{label} must fall inside the college day")
        return self


class CollegeTimingCreate(CollegeTimingBase):
    pass


class CollegeTimingOut(CollegeTimingBase):
    id: uuid.UUID
    created_at: datetime

    class Config:
        from_attributes = True
