"""Pytest configuration and shared fixtures."""

import datetime as dt

import pytest

from models import ChildProfile, WeeklyActivity
from scheduler.config import SchedulerConfig
from scheduler.state import BuildLog


def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "scenario: end-to-end behaviour scenarios (deselect with '-m \"not scenario\"')"
    )


@pytest.fixture
def week_start():
    """A Monday."""
    return dt.date(2025, 1, 6)


@pytest.fixture
def reference_date():
    return dt.date(2025, 1, 6)


@pytest.fixture
def config():
    return SchedulerConfig()


@pytest.fixture
def build_log():
    return BuildLog("child_test")


@pytest.fixture
def make_activity():
    """Factory for weekly activities with sensible defaults."""
    def _make(name="Soccer", days=("monday",), start="16:00", duration=60, **extra):
        data = {
            "name": name,
            "schedule": {"days": list(days), "startTime": start, "durationMinutes": duration},
        }
        data.update(extra)
        return WeeklyActivity.model_validate(data)
    return _make


@pytest.fixture
def scenario_a_child():
    """School-age child: wake 07:00, breakfast 08:00, school Monday 09:00-15:00."""
    return ChildProfile.model_validate({
        "id": "child_a",
        "name": "Ava",
        "dateOfBirth": "2016-03-01",
        "dailyRoutine": {
            "wakeUpTime": "07:00",
            "mealTimes": {"breakfast": "08:00"},
        },
        "schoolSchedule": {
            "monday": [{"startTime": "09:00", "endTime": "15:00"}],
        },
    })


@pytest.fixture
def toddler_child():
    """Toddler (about 2.5 years on the reference date) with a lunch and a nap."""
    return ChildProfile.model_validate({
        "id": "child_t",
        "name": "Toby",
        "dateOfBirth": "2022-07-01",
        "dailyRoutine": {
            "wakeUpTime": "06:30",
            "mealTimes": {"breakfast": "07:00", "lunch": ["12:00"], "dinner": "17:30"},
            "napTimes": [{"startTime": "13:00", "durationMinutes": 90}],
            "bedtime": "19:00",
        },
    })


@pytest.fixture
def soccer_siblings():
    """Two children aged 5 and 6 with the same Monday soccer session."""
    soccer = {
        "name": "Soccer",
        "category": "physical",
        "location": {"name": "City Park", "travelTime": 10, "type": "outdoor"},
        "schedule": {"days": ["monday"], "startTime": "16:00", "durationMinutes": 60},
    }
    return [
        ChildProfile.model_validate({
            "id": "child_mia", "name": "Mia", "dateOfBirth": "2019-09-01",
            "weeklyActivities": [dict(soccer, id="soccer_mia")],
        }),
        ChildProfile.model_validate({
            "id": "child_leo", "name": "Leo", "dateOfBirth": "2018-09-01",
            "weeklyActivities": [dict(soccer, id="soccer_leo")],
        }),
    ]
