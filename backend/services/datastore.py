from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Iterable, Mapping

from sqlalchemy import Table, delete, func, select
from sqlalchemy.orm import Session

from core.config import settings
from models import (
    CollegeTiming,
    Department,
    PersonalizedTimetable,
    Room,
    Section,
    Staff,
    StaffSubject,
    Student,
    Subject,
    Timetable,
)


logger = logging.getLogger(__name__)


TABLE_MODELS: dict[str, type] = {
    "departments": Department,
    "sections": Section,
    "subjects": Subject,
    "staff": Staff,
    "staff_subjects": StaffSubject,
    "rooms": Room,
    "college_timings": CollegeTiming,
    "timetables": Timetable,
    "students": Student,
    "personalized_timetables": PersonalizedTimetable,
}


class UnknownTableError(KeyError):
    pass


class DiagnosticStore:
    """Read-mostly access to the timetable tables by name.

    Every call opens its own short-lived session from ``session_factory`` so
    reads can run on worker threads without sharing a Session.
    """

    def __init__(self, session_factory: Callable[[], Session], *, max_workers: int | None = None) -> None:
        self._session_factory = session_factory
        self._max_workers = max_workers or settings.diagnostic_max_workers

    @staticmethod
    def _table(name: str) -> Table:
        model = TABLE_MODELS.get(name)
        if model is None:
            raise UnknownTableError(name)
        return model.__table__

    def _where(self, q, table: Table, filters: Mapping[str, Any] | None):
        for col, value in (filters or {}).items():
            q = q.where(table.c[col] == value)
        return q

    def table_columns(self, name: str) -> list[str]:
        return [c.name for c in self._table(name).columns]

    def fetch_rows(
        self,
        name: str,
        *,
        filters: Mapping[str, Any] | None = None,
        order_by: Iterable[str] | None = None,
    ) -> list[dict[str, Any]]:
        table = self._table(name)
        q = self._where(select(table), table, filters)
        for col in order_by or ():
            q = q.order_by(table.c[col].asc())
        with self._session_factory() as db:
            return [dict(row) for row in db.execute(q).mappings().all()]

    def count_rows(self, name: str, *, filters: Mapping[str, Any] | None = None) -> int:
        table = self._table(name)
        q = self._where(select(func.count()).select_from(table), table, filters)
        with self._session_factory() as db:
            return int(db.execute(q).scalar_one())

    def delete_all(self, name: str) -> int:
        table = self._table(name)
        with self._session_factory() as db, db.begin():
            result = db.execute(delete(table))
        return int(result.rowcount or 0)

    def ping(self) -> bool:
        try:
            with self._session_factory() as db:
                db.execute(select(Department.id).limit(1)).all()
        except Exception:
            logger.warning("Data store ping failed", exc_info=True)
            return False
        return True

    def load_snapshot(
        self,
        tables: Iterable[str],
        *,
        count_only: Iterable[str] = (),
    ) -> dict[str, list[dict[str, Any]] | int | Exception]:
        """Read several tables concurrently.

        Tables named in ``count_only`` are counted rather than fetched, so
        their snapshot value is an int. A failed read is stored as the
        exception for that table; the other reads still complete.
        """

        names = list(dict.fromkeys(tables))
        counted = set(count_only)
        snapshot: dict[str, list[dict[str, Any]] | int | Exception] = {}
        if not names:
            return snapshot

        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(names))) as pool:
            futures = {
                name: pool.submit(self.count_rows if name in counted else self.fetch_rows, name) for name in names
            }
            for name, fut in futures.items():
                try:
                    snapshot[name] = fut.result()
                except Exception as exc:
                    logger.warning("Failed to read table %s: %s", name, exc)
                    snapshot[name] = exc
        return snapshot
