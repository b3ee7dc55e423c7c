"""Tests for the runner script's loader and export."""

import datetime as dt
import json

from run_scheduler import load_children, main
from scheduler.engine import generate_weekly_schedule
from scheduler.state import BuildLog


def _write_family(tmp_path, children):
    path = tmp_path / "family.json"
    path.write_text(json.dumps({"familyId": "fam_1", "children": children}))
    return path


def test_invalid_records_are_skipped(tmp_path):
    path = _write_family(tmp_path, [
        {"id": "ok", "name": "Ok", "dateOfBirth": "2018-05-01"},
        {"id": "bad", "dateOfBirth": "not-a-date"},
        {"name": "no id"},
    ])
    log = BuildLog()

    children = load_children(str(path), log)

    assert [c.id for c in children] == ["ok"]
    assert [d.code for d in log.diagnostics] == ["invalid_record", "invalid_record"]
    assert log.diagnostics[0].record_id == "bad"


def test_bare_list_is_accepted(tmp_path):
    path = tmp_path / "children.json"
    path.write_text(json.dumps([{"id": "solo"}]))

    assert [c.id for c in load_children(str(path), BuildLog())] == ["solo"]


def test_main_exports_camel_case_result(tmp_path, soccer_siblings):
    family = _write_family(tmp_path, [c.model_dump(by_alias=True, mode="json") for c in soccer_siblings])
    out = tmp_path / "result.json"

    code = main([
        "--family", str(family),
        "--week-start", "2025-01-06",
        "--reference-date", "2025-01-06",
        "--out", str(out),
    ])

    assert code == 0
    data = json.loads(out.read_text())
    assert set(data["individualSchedules"]) == {"child_mia", "child_leo"}
    assert data["coordinatedActivities"][0]["activity"] == "Soccer"
    assert data["metadata"]["optimizationDate"] == "2025-01-06"


def test_main_fails_without_children(tmp_path):
    family = _write_family(tmp_path, [])

    assert main(["--family", str(family), "--out", str(tmp_path / "x.json")]) == 1


def test_one_bad_activity_keeps_the_rest_of_the_child(tmp_path):
    path = _write_family(tmp_path, [{
        "id": "child_finn",
        "name": "Finn",
        "dateOfBirth": "2016-03-01",
        "dailyRoutine": {"wakeUpTime": "07:00"},
        "schoolSchedule": {"Monday": [{"startTime": "09:00", "endTime": "15:00"}]},
        "weeklyActivities": [
            {"id": "art", "name": "Art",
             "schedule": {"days": ["monday"], "startTime": "16:00", "durationMinutes": 60}},
            {"id": "chess", "name": "Chess",
             "schedule": {"days": ["tuesday"], "startTime": "16:00"},
             "recurrence": {"type": "weekly", "days": ["tuesday"]}},
            {"id": "choir", "name": "Choir",
             "schedule": {"days": ["wednesday"], "startTime": "16:00"},
             "recurrence": {"kind": "custom"}},
            {"id": "swim", "name": "Swim",
             "schedule": {"days": ["thursday"], "startTime": "16:00"},
             "recurrence": {"kind": "biweekly", "startDate": "not-a-date"}},
        ],
    }])
    log = BuildLog()

    children = load_children(str(path), log)

    assert [c.id for c in children] == ["child_finn"]
    assert log.diagnostics == []
    child = children[0]
    assert [a.key for a in child.weekly_activities] == ["art", "chess", "choir"]
    assert [r.record_id for r in child.rejected_activities] == ["swim"]

    result = generate_weekly_schedule(child, dt.date(2025, 1, 6))
    titles = {day: [e.title for e in result.schedule[day].events] for day in ("monday", "tuesday", "wednesday", "thursday")}

    assert titles["monday"] == ["Wake Up", "School", "Art"]
    assert "Chess" in titles["tuesday"]
    assert "Choir" not in titles["wednesday"]
    assert "Swim" not in titles["thursday"]
    codes = {(d.code, d.record_id) for d in result.diagnostics}
    assert ("invalid_record", "swim") in codes
    assert ("recurrence_skipped", "choir") in codes
