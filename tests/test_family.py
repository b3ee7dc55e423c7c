"""Tests for multi-child family coordination."""

import datetime as dt

import pytest

from models import ChildProfile, Severity
from scheduler import family
from scheduler.engine import generate_weekly_schedule
from scheduler.family import (
    FamilyCoordinator,
    carpool_score,
    categorize_family_time,
    coordinate_family,
    optimize_family,
)


def _day_camp_child(child_id, dob):
    """Busy 07:00-19:00 on Saturday, free everywhere else."""
    return ChildProfile.model_validate({
        "id": child_id,
        "name": child_id.title(),
        "dateOfBirth": dob,
        "weeklyActivities": [{
            "id": f"camp_{child_id}",
            "name": "Day camp",
            "schedule": {"days": ["saturday"], "startTime": "07:00", "durationMinutes": 720},
        }],
    })


@pytest.mark.scenario
def test_scenario_b_shared_soccer(soccer_siblings, week_start, reference_date):
    result = optimize_family(soccer_siblings, week_start, reference_date)

    assert len(result.coordinated_activities) == 1
    shared = result.coordinated_activities[0]
    assert shared.activity == "Soccer"
    assert shared.day == "monday"
    assert {c.id for c in shared.children} == {"child_mia", "child_leo"}
    assert {c.age for c in shared.children} == {5, 6}
    assert shared.benefits.transportation_saving == 30
    assert shared.benefits.cost_saving == pytest.approx(0.15)


@pytest.mark.scenario
def test_scenario_e_saturday_evening_bonding(week_start, reference_date):
    children = [_day_camp_child("ana", "2017-05-01"), _day_camp_child("ben", "2019-02-01")]

    result = optimize_family(children, week_start, reference_date)

    saturday = [s for s in result.family_time_slots if s.day == "saturday"]
    assert len(saturday) == 1
    slot = saturday[0]
    assert (slot.start_time, slot.end_time, slot.duration) == ("19:00", "20:00", 60)
    assert slot.type == "evening_bonding"
    assert slot.priority == pytest.approx(60 / 60 + 2 + 1)
    assert set(slot.available_children) == {"ana", "ben"}


def test_family_time_sorted_by_priority(week_start, reference_date):
    children = [_day_camp_child("ana", "2017-05-01"), _day_camp_child("ben", "2019-02-01")]

    slots = optimize_family(children, week_start, reference_date).family_time_slots
    priorities = [s.priority for s in slots]

    assert priorities == sorted(priorities, reverse=True)
    assert slots[0].day == "sunday"


def test_family_time_requires_everyone_free(week_start, reference_date):
    free = ChildProfile(id="free", date_of_birth=dt.date(2017, 1, 1))
    busy = ChildProfile.model_validate({
        "id": "busy", "dateOfBirth": "2017-01-01",
        "schoolSchedule": {"monday": [{"startTime": "07:00", "endTime": "19:30"}]},
    })

    result = optimize_family([free, busy], week_start, reference_date)

    assert not any(s.day == "monday" for s in result.family_time_slots)


def test_shared_requires_close_ages(week_start, reference_date):
    soccer = {"name": "Soccer", "location": {"name": "Park"},
              "schedule": {"days": ["monday"], "startTime": "16:00", "durationMinutes": 60}}
    children = [
        ChildProfile.model_validate({"id": "a", "dateOfBirth": "2019-09-01", "weeklyActivities": [soccer]}),
        ChildProfile.model_validate({"id": "b", "dateOfBirth": "2014-09-01", "weeklyActivities": [soccer]}),
    ]

    assert optimize_family(children, week_start, reference_date).coordinated_activities == []


def test_shared_requires_close_start_times(week_start, reference_date):
    def child(child_id, start):
        return ChildProfile.model_validate({
            "id": child_id, "dateOfBirth": "2018-09-01",
            "weeklyActivities": [{"name": "Swim", "location": {"name": "Pool"},
                                  "schedule": {"days": ["tuesday"], "startTime": start, "durationMinutes": 30}}],
        })

    close = optimize_family([child("a", "16:00"), child("b", "16:30")], week_start, reference_date)
    apart = optimize_family([child("a", "16:00"), child("b", "16:45")], week_start, reference_date)

    assert len(close.coordinated_activities) == 1
    assert apart.coordinated_activities == []


def test_shared_groups_respect_age_and_time_limits(soccer_siblings, week_start, reference_date):
    result = optimize_family(soccer_siblings, week_start, reference_date)

    for shared in result.coordinated_activities:
        ages = [c.age for c in shared.children]
        assert max(ages) - min(ages) <= 3


@pytest.mark.parametrize("travel, days, expected", [
    (25, ["monday", "wednesday", "friday"], 0.8),
    (25, ["monday"], 0.7),
    (10, ["monday", "wednesday", "friday"], 0.6),
    (None, ["monday"], 0.5),
])
def test_carpool_score(travel, days, expected):
    assert carpool_score(travel, len(days)) == pytest.approx(expected)


def test_carpool_option_iff_score_above_threshold(reference_date):
    activities = [
        {"id": "far_often", "name": "Hockey", "location": {"name": "Rink", "travelTime": 30},
         "schedule": {"days": ["monday", "wednesday", "friday"], "startTime": "17:00"}},
        {"id": "far_once", "name": "Piano", "location": {"name": "Studio", "travelTime": 30},
         "schedule": {"days": ["tuesday"], "startTime": "17:00"}},
        {"id": "near_often", "name": "Gym", "location": {"name": "Gym", "travelTime": 5},
         "schedule": {"days": ["monday", "tuesday", "thursday"], "startTime": "15:00"}},
    ]
    child = ChildProfile.model_validate({"id": "c", "name": "Cleo", "weeklyActivities": activities})

    options = FamilyCoordinator(reference_date).find_carpool_options([child])

    assert [o.activity for o in options] == ["Hockey"]
    option = options[0]
    assert 0 <= option.carpool_score <= 1
    assert option.carpool_score > 0.7
    assert option.estimated_savings.time_minutes == 15
    assert option.estimated_savings.cost_reduction == 0.25
    assert option.estimated_savings.stress_reduction == pytest.approx(0.5)


@pytest.mark.parametrize("start, expected", [
    (7 * 60, "morning_routine"),
    (10 * 60, "weekend_activity"),
    (17 * 60 + 30, "dinner_time"),
    (19 * 60, "evening_bonding"),
    (22 * 60, "flexible"),
])
def test_categorize_family_time(start, expected):
    assert categorize_family_time(start) == expected


def test_parallel_activities_for_same_bracket(week_start, reference_date):
    children = [_day_camp_child("ana", "2017-05-01"), _day_camp_child("ben", "2018-02-01")]

    result = optimize_family(children, week_start, reference_date)

    names = {p.activity for p in result.parallel_activities}
    assert names == {"Board games", "Science experiments"}
    board = next(p for p in result.parallel_activities if p.activity == "Board games")
    # Saturday only has an hour free in the evening, which is enough for board games
    assert board.time_slot.day == "saturday"
    assert board.time_slot.start_time == "19:00"
    science = next(p for p in result.parallel_activities if p.activity == "Science experiments")
    assert science.time_slot.day == "sunday"


def test_no_parallel_activities_across_brackets(soccer_siblings, week_start, reference_date):
    # Ages 5 and 6 fall into different brackets
    assert optimize_family(soccer_siblings, week_start, reference_date).parallel_activities == []


def test_recommendations_sorted_by_rank(soccer_siblings, week_start, reference_date):
    result = optimize_family(soccer_siblings, week_start, reference_date)
    rank = {Severity.HIGH: 3, Severity.MEDIUM: 2, Severity.LOW: 1}

    ranks = [rank[r.priority] for r in result.recommendations]
    assert ranks == sorted(ranks, reverse=True)
    diversity = next(r for r in result.recommendations if r.type == "diversity")
    assert "physical" not in diversity.data["missingCategories"]
    assert "creative" in diversity.data["missingCategories"]


def test_optimization_score_is_bounded_int(soccer_siblings, week_start, reference_date):
    result = optimize_family(soccer_siblings, week_start, reference_date)

    assert isinstance(result.optimization_score, int)
    assert 0 <= result.optimization_score <= 100
    assert result.metadata.family_size == 2
    assert result.metadata.coordination_opportunities == 1
    assert result.metadata.optimization_date == reference_date


def test_no_children_is_a_caller_error(week_start, reference_date):
    with pytest.raises(ValueError):
        optimize_family([], week_start, reference_date)
    with pytest.raises(ValueError):
        coordinate_family([], {}, reference_date)


def test_coordinate_uses_prebuilt_results(soccer_siblings, week_start, reference_date):
    results = {c.id: generate_weekly_schedule(c, week_start, reference_date) for c in soccer_siblings}

    result = coordinate_family(soccer_siblings, results, reference_date)

    assert set(result.individual_schedules) == {"child_mia", "child_leo"}
    assert len(result.coordinated_activities) == 1


def test_failed_child_is_recorded_and_skipped(soccer_siblings, week_start, reference_date, monkeypatch):
    real = family.generate_weekly_schedule

    def flaky(child, *args):
        if child.id == "child_leo":
            raise RuntimeError("boom")
        return real(child, *args)

    monkeypatch.setattr(family, "generate_weekly_schedule", flaky)

    result = optimize_family(soccer_siblings, week_start, reference_date, max_workers=2)

    assert list(result.individual_schedules) == ["child_mia"]
    failed = [d for d in result.diagnostics if d.code == "schedule_failed"]
    assert len(failed) == 1
    assert failed[0].child_id == "child_leo"
    assert result.coordinated_activities == []
