from __future__ import annotations

import importlib.util
import sys
from pathlib import Path

import pytest

from conftest import add_assignment


BACKEND_DIR = Path(__file__).resolve().parents[1]


def _load(relpath: str):
    path = BACKEND_DIR / relpath
    spec = importlib.util.spec_from_file_location(path.stem, path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_create_schema_is_idempotent(engine, monkeypatch, capsys):
    migration = _load("migrations/001_create_schema.py")

    monkeypatch.setattr(sys, "argv", ["001_create_schema.py"])
    assert migration.main() == 0
    assert "Dry run only" in capsys.readouterr().out

    monkeypatch.setattr(sys, "argv", ["001_create_schema.py", "--yes"])
    assert migration.main() == 0
    assert migration.main() == 0


def test_diag_script_reports_and_clears(db, seeded, monkeypatch, capsys):
    script = _load("_diag_timetable_constraints.py")

    monkeypatch.setattr(sys, "argv", ["_diag_timetable_constraints.py"])
    assert script.main() == 0
    assert "DATABASE DIAGNOSTIC REPORT" in capsys.readouterr().out

    add_assignment(db, seeded)
    add_assignment(db, seeded)
    assert script.main() == 2

    monkeypatch.setattr(sys, "argv", ["_diag_timetable_constraints.py", "--clear"])
    with pytest.raises(SystemExit):
        script.main()

    monkeypatch.setattr(
        sys, "argv", ["_diag_timetable_constraints.py", "--clear", "--confirm", script.CONFIRM_PHRASE]
    )
    assert script.main() == 0
    assert "Successfully cleared 2 timetable entries" in capsys.readouterr().out
