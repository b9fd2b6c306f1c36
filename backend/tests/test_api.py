from __future__ import annotations

import json
import uuid

from sqlalchemy.exc import IntegrityError

from api.routes import timetables as timetables_routes
from conftest import add_assignment


def _seed_via_api(client) -> dict[str, str]:
    dept = client.post("/api/departments/", json={"code": "ece", "name": "Electronics"}).json()
    section = client.post(
        "/api/sections/", json={"department_id": dept["id"], "name": "ECE-A", "semester": 5}
    ).json()
    subject = client.post(
        "/api/subjects/",
        json={"department_id": dept["id"], "code": "ec501", "name": "Signals", "semester": 5},
    ).json()
    staff = client.post(
        "/api/staff/",
        json={
            "department_id": dept["id"],
            "name": "M. Das",
            "designation": "Professor",
            "subject_ids": [subject["id"]],
        },
    ).json()
    room = client.post("/api/rooms/", json={"room_number": "C-204", "capacity": 40}).json()
    client.put(
        "/api/college-timings/1",
        json={"day_of_week": 1, "start_time": "09:00", "end_time": "16:00"},
    ).raise_for_status()
    return {
        "department_id": dept["id"],
        "section_id": section["id"],
        "subject_id": subject["id"],
        "staff_id": staff["id"],
        "room_id": room["id"],
    }


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"app": "ok", "database": "ok"}


def test_crud_roundtrip(client):
    ids = _seed_via_api(client)

    depts = client.get("/api/departments/").json()
    assert [d["code"] for d in depts] == ["ECE"]

    staff = client.get("/api/staff/").json()
    assert staff[0]["subject_ids"] == [ids["subject_id"]]

    r = client.patch(f"/api/rooms/{ids['room_id']}", json={"capacity": 55})
    assert r.status_code == 200
    assert r.json()["capacity"] == 55

    r = client.post("/api/rooms/", json={"room_number": "C-204"})
    assert r.status_code == 409

    r = client.post("/api/departments/", json={"code": "   ", "name": "Blank"})
    assert r.status_code == 400
    assert r.json()["detail"] == "INVALID_CODE"

    r = client.delete(f"/api/departments/{ids['department_id']}")
    assert r.status_code == 409


def test_unknown_ids_are_404(client):
    missing = "00000000-0000-0000-0000-000000000001"
    assert client.patch(f"/api/sections/{missing}", json={"name": "x"}).status_code == 404
    assert client.delete(f"/api/staff/{missing}").status_code == 404
    assert client.get(f"/api/timetables/section/{missing}").status_code == 404


def test_college_timing_validation(client):
    r = client.put(
        "/api/college-timings/2",
        json={"day_of_week": 2, "start_time": "16:00", "end_time": "09:00"},
    )
    assert r.status_code == 422

    r = client.put(
        "/api/college-timings/2",
        json={"day_of_week": 3, "start_time": "09:00", "end_time": "16:00"},
    )
    assert r.status_code == 400


def test_import_and_view_timetable(client):
    ids = _seed_via_api(client)
    entries = [
        {**ids, "day_of_week": 1, "time_slot": 1, "semester": 5},
        {**ids, "day_of_week": 1, "time_slot": 2, "semester": 5},
    ]
    text = "Here you go:\n```json\n" + json.dumps(entries) + "\n```"

    r = client.post("/api/timetables/import", json={"response_text": text, "semester": 5})
    assert r.status_code == 200
    assert r.json()["accepted"] == 2

    grid = client.get(f"/api/timetables/section/{ids['section_id']}").json()
    assert [(g["day_of_week"], g["time_slot"]) for g in grid] == [(1, 1), (1, 2)]
    assert grid[0]["subject_code"] == "EC501"
    assert grid[0]["room_number"] == "C-204"

    stats = client.get("/api/dashboard/stats").json()
    assert stats["timetable_entries"] == 2
    assert stats["counts"]["staff_subjects"] == 1

    r = client.post("/api/timetables/import", json={"response_text": "sorry", "semester": 5})
    assert r.status_code == 422


def test_diagnostics_endpoints(client, db, seeded):
    add_assignment(db, seeded)
    add_assignment(db, seeded)

    full = client.get("/api/diagnostics/").json()
    assert full["success"] is True
    assert full["healthy"] is False
    assert full["data"]["conflict_summary"]["room_conflicts"] == 1

    scan = client.get("/api/diagnostics/conflicts").json()
    assert scan["total_entries"] == 2
    assert scan["section_conflicts"] == 1
    assert {g["kind"] for g in scan["groups"]} == {"staff", "room", "section"}
    assert all(g["count"] == 2 for g in scan["groups"])

    integrity = client.get("/api/diagnostics/integrity").json()
    assert integrity["success"] is True
    assert integrity["counts"]["staff_subjects"] == 1
    assert integrity["staff_subjects"] == 1


def test_clear_requires_confirmation(client, db, seeded):
    add_assignment(db, seeded)

    r = client.post("/api/diagnostics/clear-timetables")
    assert r.status_code == 400

    r = client.post("/api/diagnostics/clear-timetables", params={"confirm": "true"})
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Successfully cleared 1 timetable entries", "cleared_count": 1}

    r = client.post("/api/diagnostics/clear-timetables", params={"confirm": "true"})
    assert r.json()["cleared_count"] == 0


def test_import_with_made_up_room(client):
    ids = _seed_via_api(client)
    entries = [{**ids, "room_id": str(uuid.uuid4()), "day_of_week": 1, "time_slot": 1, "semester": 5}]

    r = client.post("/api/timetables/import", json={"response_text": json.dumps(entries), "semester": 5})

    assert r.status_code == 200
    body = r.json()
    assert body["accepted"] == 0
    assert body["rejected_invalid"] == 1
    assert client.get("/api/timetables/").json() == []


def test_import_integrity_error_is_409(client, monkeypatch):
    def _fail(*_args, **_kwargs):
        raise IntegrityError("INSERT INTO timetables", {}, Exception("FOREIGN KEY constraint failed"))

    monkeypatch.setattr(timetables_routes, "import_generated_assignments", _fail)

    r = client.post("/api/timetables/import", json={"response_text": "[]", "semester": 5})

    assert r.status_code == 409
    assert r.json()["detail"]["code"] == "INVALID_REFERENCES"


def test_student_crud_and_search(client):
    dept = client.post("/api/departments/", json={"code": "me", "name": "Mechanical"}).json()
    r = client.post(
        "/api/students/",
        json={"roll_no": " 21ME001 ", "name": "A. Nair", "email": "a.nair@example.edu", "department_id": dept["id"]},
    )
    assert r.status_code == 200
    student = r.json()
    assert student["roll_no"] == "21ME001"
    assert student["semester"] == 1

    client.post("/api/students/", json={"roll_no": "21ME002", "name": "K. Rao", "semester": 3}).raise_for_status()

    assert client.post("/api/students/", json={"roll_no": "21ME001", "name": "Dup"}).status_code == 409
    assert client.post("/api/students/", json={"roll_no": "X", "name": "Y", "department_id": str(uuid.uuid4())}).status_code == 404

    found = client.get("/api/students/", params={"q": "nair"}).json()
    assert [s["roll_no"] for s in found] == ["21ME001"]
    assert [s["name"] for s in client.get("/api/students/", params={"semester": 3}).json()] == ["K. Rao"]

    r = client.patch(f"/api/students/{student['id']}", json={"semester": 4, "email": "  "})
    assert r.status_code == 200
    assert r.json()["semester"] == 4
    assert r.json()["email"] is None

    stats = client.get("/api/dashboard/stats").json()
    assert stats["counts"]["students"] == 2

    assert client.delete(f"/api/students/{student['id']}").json() == {"ok": True}
    assert client.get(f"/api/students/{student['id']}").status_code == 404


def test_personalized_timetables(client):
    student = client.post("/api/students/", json={"roll_no": "22CS010", "name": "P. Sen", "semester": 2}).json()
    url = f"/api/students/{student['id']}/timetables"

    r = client.post(
        url,
        json={
            "entries": [
                {"day": "Mon", "start_time": "08:00", "end_time": "08:55", "subject_code": "CS201"},
            ],
            "model_version": "v1",
        },
    )
    assert r.status_code == 200
    first = r.json()
    assert first["timetable_json"] == [
        {
            "day": "Mon",
            "start_time": "08:00",
            "end_time": "08:55",
            "subject_code": "CS201",
            "subject_name": None,
            "faculty_name": None,
            "room": "TBD",
        }
    ]

    text = (
        'Here is the plan:\n{"day": "Tue", "start_time": "10:15", "end_time": "11:10"},\n'
        '{"day": "Sun", "start_time": "10:15", "end_time": "11:10"}'
    )
    r = client.post(url, json={"response_text": text})
    assert r.status_code == 200
    assert [e["day"] for e in r.json()["timetable_json"]] == ["Tue"]

    saved = client.get(url).json()
    assert len(saved) == 2
    assert saved[0]["timetable_json"][0]["day"] == "Tue"
    assert saved[1]["model_version"] == "v1"

    r = client.post(url, json={"response_text": "no timetable today"})
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "INVALID_GENERATOR_RESPONSE"

    # exactly one of entries / response_text
    assert client.post(url, json={}).status_code == 422

    assert client.get(f"/api/students/{uuid.uuid4()}/timetables").status_code == 404

    client.delete(f"/api/students/{student['id']}").raise_for_status()
    assert client.get("/api/students/").json() == []
