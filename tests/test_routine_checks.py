"""Tests for routine and activity review."""

from models import AgeGroup, DailyRoutine, WeeklyActivity
from scheduler.routine_checks import review_activity, review_routine, sleep_minutes


def _routine(**fields):
    return DailyRoutine.model_validate(fields)


def _types(issues):
    return [issue.type for issue in issues]


def test_sleep_wraps_past_midnight():
    assert sleep_minutes(_routine(bedtime="19:30", wakeUpTime="07:00")) == 690
    assert sleep_minutes(_routine(bedtime="01:00", wakeUpTime="07:00")) == 360


def test_short_sleep_warning_depends_on_age():
    routine = _routine(bedtime="21:00", wakeUpTime="07:00")

    assert "sleep_duration" in _types(review_routine(routine, AgeGroup.TODDLER).warnings)
    assert "sleep_duration" not in _types(review_routine(routine, AgeGroup.SCHOOL).warnings)


def test_meal_spacing_errors_and_warnings():
    routine = _routine(
        wakeUpTime="07:00",
        bedtime="20:00",
        mealTimes={"breakfast": "07:30", "lunch": ["08:30"], "dinner": "18:00"},
    )

    review = review_routine(routine, AgeGroup.SCHOOL)

    assert not review.is_valid
    assert _types(review.errors) == ["meal_spacing"]
    assert "meal_spacing" in _types(review.warnings)


def test_late_breakfast_warning():
    routine = _routine(wakeUpTime="06:00", bedtime="20:00", mealTimes={"breakfast": "08:30"})

    assert "breakfast_timing" in _types(review_routine(routine, AgeGroup.SCHOOL).warnings)


def test_nap_checks():
    routine = _routine(
        wakeUpTime="06:30",
        bedtime="19:00",
        napTimes=[
            {"startTime": "09:00", "durationMinutes": 20},
            {"startTime": "09:10", "durationMinutes": 200},
        ],
    )

    review = review_routine(routine, AgeGroup.INFANT)

    assert "overlapping_naps" in _types(review.errors)
    warnings = _types(review.warnings)
    assert "short_nap" in warnings
    assert "long_nap" in warnings


def test_nap_too_close_to_bedtime():
    routine = _routine(wakeUpTime="06:30", bedtime="19:00", napTimes=[{"startTime": "15:00", "durationMinutes": 90}])

    assert "nap_bedtime_proximity" in _types(review_routine(routine, AgeGroup.TODDLER).warnings)


def test_missing_naps_for_young_children_only():
    routine = _routine(wakeUpTime="07:00", bedtime="19:00")

    assert "missing_naps" in _types(review_routine(routine, AgeGroup.TODDLER).warnings)
    assert "missing_naps" not in _types(review_routine(routine, AgeGroup.PRESCHOOL).warnings)


def test_missing_routine_is_invalid():
    review = review_routine(None, AgeGroup.SCHOOL)

    assert not review.is_valid
    assert _types(review.errors) == ["missing_routine"]


def test_review_activity():
    good = WeeklyActivity.model_validate({
        "name": "Art", "schedule": {"days": ["monday"], "startTime": "15:00", "durationMinutes": 60},
    })
    long = WeeklyActivity.model_validate({
        "name": "Camp", "schedule": {"days": ["monday"], "startTime": "09:00", "durationMinutes": 300},
    })
    broken = WeeklyActivity.model_validate({"name": " ", "schedule": {"durationMinutes": 0}})

    assert review_activity(good).is_valid
    assert _types(review_activity(long).warnings) == ["long_activity"]
    assert _types(review_activity(broken).errors) == [
        "missing_name", "missing_days", "missing_time", "invalid_duration",
    ]
