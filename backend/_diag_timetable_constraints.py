from __future__ import annotations

import argparse
import json

from core.config import settings
from core.database import SessionLocal, validate_db_connection
from core.logging import setup_logging
from services.datastore import DiagnosticStore
from services.diagnostics import clear_all_assignments, run_full_diagnostic


CONFIRM_PHRASE = "CLEAR_TIMETABLES"


def main() -> int:
    parser = argparse.ArgumentParser(
        description=(
            "Print the timetable database diagnostic (empty tables, departments without sections, "
            "staff/room/section double-booking). Optionally clear every timetable entry."
        )
    )
    parser.add_argument("--json", action="store_true", help="Print issues/recommendations/data as JSON too.")
    parser.add_argument(
        "--clear",
        action="store_true",
        help="After the report, delete ALL timetable entries (clear-and-regenerate remediation).",
    )
    parser.add_argument(
        "--confirm",
        type=str,
        default=None,
        help=f"Must be exactly {CONFIRM_PHRASE!r} to run with --clear.",
    )
    args = parser.parse_args()

    setup_logging(environment=settings.environment, level=settings.log_level, log_dir=settings.log_dir)

    with SessionLocal() as db:
        validate_db_connection(db)

    store = DiagnosticStore(SessionLocal)
    result = run_full_diagnostic(store)
    print(result.report)
    if args.json:
        print(
            json.dumps(
                {"issues": result.issues, "recommendations": result.recommendations, "data": result.data},
                indent=2,
                default=str,
            )
        )

    if not result.success:
        return 1

    if args.clear:
        if args.confirm != CONFIRM_PHRASE:
            raise SystemExit(f"Refusing to delete. Pass --confirm {CONFIRM_PHRASE!r} to proceed.")
        cleared = clear_all_assignments(store)
        print(cleared.message)
        return 0 if cleared.success else 1

    return 0 if result.healthy else 2


if __name__ == "__main__":
    raise SystemExit(main())
