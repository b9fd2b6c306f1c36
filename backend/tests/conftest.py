from __future__ import annotations

import os
import tempfile
import uuid
from datetime import time
from pathlib import Path

# Settings and the engine are built at import time; point them at a throwaway DB first.
_DB_PATH = Path(tempfile.mkdtemp(prefix="timetable-tests-")) / "test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_PATH}"
os.environ["ENVIRONMENT"] = "test"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from core.database import ENGINE, SessionLocal  # noqa: E402
from models import (  # noqa: E402
    Base,
    CollegeTiming,
    Department,
    Room,
    Section,
    Staff,
    StaffSubject,
    Subject,
    Timetable,
)
from services.datastore import DiagnosticStore  # noqa: E402


@pytest.fixture
def engine():
    Base.metadata.create_all(ENGINE)
    yield ENGINE
    Base.metadata.drop_all(ENGINE)


@pytest.fixture
def db(engine):
    with SessionLocal() as session:
        yield session


@pytest.fixture
def store(engine) -> DiagnosticStore:
    return DiagnosticStore(SessionLocal)


@pytest.fixture
def client(engine):
    from main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def seeded(db) -> dict[str, uuid.UUID]:
    """One of everything: enough for the integrity check to pass."""

    dept = Department(code="CSE", name="Computer Science")
    db.add(dept)
    db.flush()

    section = Section(department_id=dept.id, name="CSE-A", semester=3)
    subject = Subject(department_id=dept.id, code="CS301", name="Operating Systems", semester=3)
    staff = Staff(department_id=dept.id, name="R. Iyer", designation="Assistant Professor")
    room = Room(room_number="B-101", room_type="CLASSROOM", capacity=60)
    timing = CollegeTiming(day_of_week=1, start_time=time(9, 0), end_time=time(16, 0))
    db.add_all([section, subject, staff, room, timing])
    db.flush()

    db.add(StaffSubject(staff_id=staff.id, subject_id=subject.id))
    db.commit()

    return {
        "department_id": dept.id,
        "section_id": section.id,
        "subject_id": subject.id,
        "staff_id": staff.id,
        "room_id": room.id,
    }


def add_assignment(db, seeded, **overrides) -> Timetable:
    data = {
        "section_id": seeded["section_id"],
        "subject_id": seeded["subject_id"],
        "staff_id": seeded["staff_id"],
        "room_id": seeded["room_id"],
        "day_of_week": 1,
        "time_slot": 1,
        "semester": 3,
    }
    data.update(overrides)
    row = Timetable(**data)
    db.add(row)
    db.commit()
    return row
