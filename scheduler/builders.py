"""
Fixed-event builders.

Expands the two kinds of immovable commitments into events for one day:
1. The daily routine (wake-up, meals, snacks, naps, bedtime)
2. The school schedule (one event per block)

A missing field simply produces no event. A malformed time omits that one
event and records a diagnostic; it never aborts the rest of the day.
"""

from typing import List, Optional

from models import (
    DailyRoutine,
    Event,
    EventMetadata,
    EventType,
    Priority,
    Responsibility,
    SchoolBlock,
)
from .state import BuildLog
from .timeutils import parse_time

# Fixed durations (minutes) for routine slots
WAKE_UP_MINUTES = 30
BREAKFAST_MINUTES = 30
LUNCH_MINUTES = 45
DINNER_MINUTES = 45
SNACK_MINUTES = 15
BEDTIME_MINUTES = 60

DEFAULT_SCHOOL_TRAVEL_MINUTES = 15

# Care tasks fall to the au pair, meals and bedtime to the parents
DEFAULT_RESPONSIBILITY = {
    "wake_up": Responsibility.AU_PAIR,
    "nap": Responsibility.AU_PAIR,
    "breakfast": Responsibility.PARENT,
    "lunch": Responsibility.PARENT,
    "dinner": Responsibility.PARENT,
    "snack": Responsibility.PARENT,
    "bedtime": Responsibility.PARENT,
}


def _routine_event(
    log: BuildLog,
    day: str,
    child_id: str,
    routine: DailyRoutine,
    kind: str,
    event_id: str,
    title: str,
    event_type: EventType,
    category: str,
    start: Optional[str],
    duration: int
) -> Optional[Event]:
    """Build one fixed routine event, or record why it was skipped."""
    if not start:
        return None

    try:
        start_minute = parse_time(start)
        return Event(
            id=event_id,
            title=title,
            type=event_type,
            start_minute=start_minute,
            end_minute=start_minute + duration,
            priority=Priority.ESSENTIAL,
            is_fixed=True,
            child_id=child_id,
            responsibility=routine.responsibilities.get(kind, DEFAULT_RESPONSIBILITY[kind]),
            metadata=EventMetadata(category=category, routine_kind=kind, is_routine=True)
        )
    except ValueError as e:
        code = "invalid_duration" if duration <= 0 else "invalid_time"
        log.record_skip(code, f"{title} omitted: {e}", day=day, record_id=event_id)
        return None


def build_routine_events(
    routine: Optional[DailyRoutine],
    day: str,
    child_id: str,
    log: BuildLog
) -> List[Event]:
    """
    Expand the routine into ESSENTIAL fixed events for one weekday.
    """
    if routine is None:
        return []

    meals = routine.meal_times
    specs = [
        ("wake_up", f"wakeup-{day}", "Wake Up", EventType.ROUTINE, "sleep", routine.wake_up_time, WAKE_UP_MINUTES),
        ("breakfast", f"breakfast-{day}", "Breakfast", EventType.MEAL, "meal", meals.breakfast, BREAKFAST_MINUTES),
    ]
    for i, lunch in enumerate(meals.lunch):
        specs.append(("lunch", f"lunch-{day}-{i}", "Lunch", EventType.MEAL, "meal", lunch, LUNCH_MINUTES))
    specs.append(("dinner", f"dinner-{day}", "Dinner", EventType.MEAL, "meal", meals.dinner, DINNER_MINUTES))
    for i, snack in enumerate(meals.snacks):
        specs.append(("snack", f"snack-{day}-{i}", "Snack", EventType.MEAL, "snack", snack, SNACK_MINUTES))
    for i, nap in enumerate(routine.nap_times):
        specs.append(("nap", f"nap-{day}-{i}", "Nap Time", EventType.ROUTINE, "sleep", nap.start_time, nap.duration_minutes))
    specs.append(("bedtime", f"bedtime-{day}", "Bedtime", EventType.ROUTINE, "sleep", routine.bedtime, BEDTIME_MINUTES))

    events = []
    for kind, event_id, title, event_type, category, start, duration in specs:
        event = _routine_event(log, day, child_id, routine, kind, event_id, title, event_type, category, start, duration)
        if event:
            events.append(event)
    return events


def _school_preparation(block_type: str) -> List[str]:
    if block_type == "School":
        return ["Backpack", "Lunch", "Homework"]
    return ["Snack", "Comfort items"]


def build_school_events(
    blocks: List[SchoolBlock],
    day: str,
    child_id: str,
    log: BuildLog
) -> List[Event]:
    """
    One ESSENTIAL fixed 'school' event per block. No blocks -> no events.
    """
    events = []
    for block in blocks:
        event_id = f"school-{day}-{block.start_time}"
        try:
            start = parse_time(block.start_time)
            end = parse_time(block.end_time)
            if end <= start:
                raise ValueError(f"block ends ({block.end_time}) before it starts ({block.start_time})")
        except ValueError as e:
            log.record_skip("invalid_school_block", f"School block omitted: {e}", day=day, record_id=event_id)
            continue

        travel = block.travel_time if block.travel_time is not None else DEFAULT_SCHOOL_TRAVEL_MINUTES
        events.append(Event(
            id=event_id,
            title=block.type,
            type=EventType.SCHOOL,
            start_minute=start,
            end_minute=end,
            priority=Priority.ESSENTIAL,
            is_fixed=True,
            child_id=child_id,
            responsibility=block.responsibility,
            metadata=EventMetadata(
                category="school",
                is_school=True,
                travel_time=travel,
                preparation=_school_preparation(block.type)
            )
        ))
    return events
