from __future__ import annotations

"""Create the timetable tables and the indexes the conflict scan groups by.

Safe to run multiple times (create_all skips existing tables; indexes use IF NOT EXISTS).

Run:
  python backend/migrations/001_create_schema.py --yes
"""

import argparse
import sys
from pathlib import Path

# Allow running this script from any working directory.
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import inspect, text

from core.database import ENGINE
from models import Base


INDEX_STATEMENTS = [
    "CREATE INDEX IF NOT EXISTS idx_timetables_staff_day_slot ON timetables (staff_id, day_of_week, time_slot);",
    "CREATE INDEX IF NOT EXISTS idx_timetables_room_day_slot ON timetables (room_id, day_of_week, time_slot);",
    "CREATE INDEX IF NOT EXISTS idx_timetables_section_day_slot ON timetables (section_id, day_of_week, time_slot);",
    "CREATE INDEX IF NOT EXISTS idx_sections_department ON sections (department_id);",
    "CREATE INDEX IF NOT EXISTS idx_staff_subjects_staff ON staff_subjects (staff_id);",
]


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--yes", action="store_true", help="Actually apply changes")
    args = parser.parse_args()

    existing = set(inspect(ENGINE).get_table_names())
    missing = [t.name for t in Base.metadata.sorted_tables if t.name not in existing]
    print("Tables to create:", ", ".join(missing) if missing else "(none)")
    print(f"Indexes to ensure: {len(INDEX_STATEMENTS)}")

    if not args.yes:
        print("Dry run only. Re-run with --yes to apply.")
        return 0

    Base.metadata.create_all(ENGINE)
    with ENGINE.begin() as conn:
        for stmt in INDEX_STATEMENTS:
            conn.execute(text(stmt))

    print("OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
