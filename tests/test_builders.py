"""Tests for routine and school event builders."""

from models import DailyRoutine, EventType, Priority, Responsibility, SchoolBlock
from scheduler.builders import build_routine_events, build_school_events


def test_routine_events_use_fixed_durations(build_log):
    routine = DailyRoutine.model_validate({
        "wakeUpTime": "07:00",
        "mealTimes": {"breakfast": "07:30", "lunch": ["11:30", "12:30"], "dinner": "18:00", "snacks": ["15:00"]},
        "napTimes": [{"startTime": "13:00", "durationMinutes": 75}],
        "bedtime": "19:30",
    })

    events = build_routine_events(routine, "monday", "child_test", build_log)
    durations = {e.id: e.duration_minutes for e in events}

    assert durations == {
        "wakeup-monday": 30,
        "breakfast-monday": 30,
        "lunch-monday-0": 45,
        "lunch-monday-1": 45,
        "dinner-monday": 45,
        "snack-monday-0": 15,
        "nap-monday-0": 75,
        "bedtime-monday": 60,
    }
    assert all(e.priority == Priority.ESSENTIAL and e.is_fixed for e in events)
    assert len(build_log) == 0


def test_routine_responsibility_defaults_and_overrides(build_log):
    routine = DailyRoutine.model_validate({
        "wakeUpTime": "07:00",
        "mealTimes": {"dinner": "18:00"},
        "napTimes": [{"startTime": "13:00"}],
        "bedtime": "19:30",
        "responsibilities": {"bedtime": "shared"},
    })

    events = {e.metadata.routine_kind: e for e in build_routine_events(routine, "friday", "c", build_log)}

    assert events["wake_up"].responsibility == Responsibility.AU_PAIR
    assert events["nap"].responsibility == Responsibility.AU_PAIR
    assert events["dinner"].responsibility == Responsibility.PARENT
    assert events["bedtime"].responsibility == Responsibility.SHARED


def test_missing_routine_fields_produce_no_events(build_log):
    routine = DailyRoutine.model_validate({"wakeUpTime": "07:00"})

    events = build_routine_events(routine, "monday", "c", build_log)

    assert [e.title for e in events] == ["Wake Up"]
    assert build_routine_events(None, "monday", "c", build_log) == []
    assert len(build_log) == 0


def test_malformed_time_omits_event_and_records_diagnostic(build_log):
    routine = DailyRoutine.model_validate({
        "wakeUpTime": "7 o'clock",
        "mealTimes": {"breakfast": "07:30"},
    })

    events = build_routine_events(routine, "tuesday", "c", build_log)

    assert [e.title for e in events] == ["Breakfast"]
    assert [d.code for d in build_log.diagnostics] == ["invalid_time"]
    assert build_log.diagnostics[0].day == "tuesday"


def test_school_event_defaults(build_log):
    blocks = [
        SchoolBlock(start_time="09:00", end_time="15:00"),
        SchoolBlock(start_time="15:30", end_time="17:00", type="Daycare", travel_time=5),
    ]

    events = build_school_events(blocks, "monday", "c", build_log)

    assert [e.type for e in events] == [EventType.SCHOOL, EventType.SCHOOL]
    assert events[0].duration_minutes == 360
    assert events[0].metadata.travel_time == 15
    assert events[0].metadata.preparation == ["Backpack", "Lunch", "Homework"]
    assert events[1].metadata.travel_time == 5
    assert events[1].metadata.preparation == ["Snack", "Comfort items"]


def test_invalid_school_block_is_skipped(build_log):
    blocks = [
        SchoolBlock(start_time="15:00", end_time="09:00"),
        SchoolBlock(start_time="09:00", end_time="12:00"),
    ]

    events = build_school_events(blocks, "wednesday", "c", build_log)

    assert len(events) == 1
    assert build_log.get_failure_report() == {"invalid_school_block": 1}


def test_no_school_blocks_means_no_events(build_log):
    assert build_school_events([], "saturday", "c", build_log) == []
