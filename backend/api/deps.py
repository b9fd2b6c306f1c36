from __future__ import annotations

from fastapi import HTTPException

from core.database import SessionLocal
from services.datastore import DiagnosticStore


def get_store() -> DiagnosticStore:
    return DiagnosticStore(SessionLocal)


def clean_text(value: object, *, code: str) -> str:
    """Strip a required text field; blank values are a 400 with ``code`` as detail."""

    cleaned = str(value).strip()
    if not cleaned:
        raise HTTPException(status_code=400, detail=code)
    return cleaned


def clean_optional_text(value: object | None) -> str | None:
    if value is None:
        return None
    return str(value).strip() or None
