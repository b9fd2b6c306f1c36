from __future__ import annotations

import json
import logging
import re
import uuid
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field, ValidationError
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from core.config import settings
from models.room import Room
from models.section import Section
from models.staff import Staff
from models.subject import Subject
from models.timetable import Timetable


logger = logging.getLogger(__name__)


_FENCE_RE = re.compile(r"```(?:json)?\s*|\s*```")

# Keys model responses commonly wrap the assignment array in.
_WRAPPER_KEYS = ("timetable", "entries", "schedule", "data", "result", "output")

# Reference columns of a generated entry and the table each one must exist in.
_REFERENCES = (
    ("section_id", Section),
    ("subject_id", Subject),
    ("staff_id", Staff),
    ("room_id", Room),
)


class GenerationParseError(ValueError):
    """The generator response did not contain a JSON array of assignments."""


class GeneratedAssignment(BaseModel):
    section_id: uuid.UUID
    subject_id: uuid.UUID
    staff_id: uuid.UUID
    room_id: uuid.UUID
    day_of_week: int = Field(ge=1, le=6)
    time_slot: int = Field(ge=1, le=8)
    semester: int = Field(ge=1, le=8)


@dataclass
class ImportResult:
    accepted: int
    rejected_invalid: int
    rejected_conflicts: int
    replaced: int
    section_ids: list[uuid.UUID]


def _array_in_object(obj: dict[str, Any]) -> list[Any] | None:
    for key in _WRAPPER_KEYS:
        if isinstance(obj.get(key), list):
            return obj[key]
    for value in obj.values():
        if isinstance(value, list) and value:
            return value
    return None


def _scan_for(text: str, opener: str) -> list[Any] | None:
    decoder = json.JSONDecoder()
    idx = text.find(opener)
    while idx != -1:
        try:
            value, _end = decoder.raw_decode(text, idx)
        except ValueError:
            value = None
        if isinstance(value, list):
            return value
        if isinstance(value, dict):
            found = _array_in_object(value)
            if found is not None:
                return found
        idx = text.find(opener, idx + 1)
    return None


def _collect_objects(text: str) -> list[Any] | None:
    # Bare objects with no enclosing array: {...}, {...}
    decoder = json.JSONDecoder()
    objects: list[Any] = []
    idx = text.find("{")
    while idx != -1:
        try:
            value, end = decoder.raw_decode(text, idx)
        except ValueError:
            idx = text.find("{", idx + 1)
            continue
        if isinstance(value, dict):
            objects.append(value)
        idx = text.find("{", end)
    return objects or None


def extract_json_array(text: str) -> list[Any] | None:
    """Pull the assignment array out of free-form generator output.

    Tries, in order: the whole text as JSON, the first decodable ``[...]``
    literal, an array held by the first decodable ``{...}`` object, and
    last every top-level ``{...}`` object in the text gathered into a list.
    """

    cleaned = _FENCE_RE.sub("", text or "").strip()
    if not cleaned:
        return None

    try:
        parsed = json.loads(cleaned)
    except ValueError:
        parsed = None
    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, dict):
        return _array_in_object(parsed)

    found = _scan_for(cleaned, "[")
    if found is not None:
        return found
    found = _scan_for(cleaned, "{")
    if found is not None:
        return found
    return _collect_objects(cleaned)


def _referenced_ids(raw: list[Any]) -> dict[str, set[uuid.UUID]]:
    found: dict[str, set[uuid.UUID]] = {col: set() for col, _model in _REFERENCES}
    for item in raw:
        if not isinstance(item, dict):
            continue
        for col, ids in found.items():
            try:
                ids.add(uuid.UUID(str(item.get(col))))
            except ValueError:
                continue
    return found


def existing_reference_ids(db: Session, raw: list[Any]) -> dict[str, set[uuid.UUID]]:
    """Return, per reference column, the candidate ids that exist in the database."""

    existing: dict[str, set[uuid.UUID]] = {}
    referenced = _referenced_ids(raw)
    for col, model in _REFERENCES:
        ids = referenced[col]
        if not ids:
            existing[col] = set()
            continue
        existing[col] = set(db.execute(select(model.id).where(model.id.in_(ids))).scalars().all())
    return existing


def validate_candidates(
    raw: list[Any],
    *,
    semester: int,
    known_ids: dict[str, set[uuid.UUID]] | None = None,
) -> tuple[list[GeneratedAssignment], int, int]:
    """Return (accepted, invalid count, conflicting count).

    Candidates outside the configured grid or for another semester are
    invalid, as are candidates naming an id missing from ``known_ids`` when
    it is given. Of candidates that double-book a staff member, room or
    section, the first one seen is kept.
    """

    accepted: list[GeneratedAssignment] = []
    invalid = 0
    conflicting = 0
    used: set[tuple[str, Any, int, int]] = set()

    for item in raw:
        try:
            entry = GeneratedAssignment.model_validate(item)
        except ValidationError:
            invalid += 1
            continue
        if (
            entry.semester != semester
            or entry.day_of_week > settings.days_per_week
            or entry.time_slot > settings.slots_per_day
        ):
            invalid += 1
            continue
        if known_ids is not None and any(
            getattr(entry, col) not in known_ids.get(col, ()) for col, _model in _REFERENCES
        ):
            invalid += 1
            continue

        keys = [
            ("staff", entry.staff_id, entry.day_of_week, entry.time_slot),
            ("room", entry.room_id, entry.day_of_week, entry.time_slot),
            ("section", entry.section_id, entry.day_of_week, entry.time_slot),
        ]
        if any(k in used for k in keys):
            conflicting += 1
            continue
        used.update(keys)
        accepted.append(entry)

    return accepted, invalid, conflicting


def import_generated_assignments(db: Session, text: str, *, semester: int) -> ImportResult:
    """Replace the timetables of every section covered by the generated output.

    Existing rows of the affected sections are deleted and the accepted
    candidates inserted in one transaction. There is no rollback across the
    generation step itself.
    """

    raw = extract_json_array(text)
    if raw is None:
        raise GenerationParseError("No JSON array found in generator response")

    accepted, invalid, conflicting = validate_candidates(
        raw, semester=semester, known_ids=existing_reference_ids(db, raw)
    )
    if invalid or conflicting:
        logger.warning(
            "Dropped %d invalid and %d conflicting generated entries (of %d)", invalid, conflicting, len(raw)
        )

    section_ids = sorted({e.section_id for e in accepted}, key=str)
    replaced = 0
    if section_ids:
        try:
            result = db.execute(delete(Timetable).where(Timetable.section_id.in_(section_ids)))
            replaced = int(result.rowcount or 0)
            db.add_all(Timetable(**e.model_dump()) for e in accepted)
            db.commit()
        except Exception:
            db.rollback()
            raise

    logger.info("Imported %d generated entries across %d section(s)", len(accepted), len(section_ids))
    return ImportResult(
        accepted=len(accepted),
        rejected_invalid=invalid,
        rejected_conflicts=conflicting,
        replaced=replaced,
        section_ids=section_ids,
    )
