"""
Recurring activity expansion.

Answers "does activity X happen on date D?" for the three recurrence kinds
and materialises matching activities as MEDIUM-priority, movable events.

- weekly:   the weekday is in the rule's day list
- biweekly: weekday matches AND whole weeks since the start date is even
- monthly:  (same_date only) day-of-month equals the start date's

Biweekly and monthly rules fall back to the activity's own start date.
Any other kind never occurs.
"""

import logging
from datetime import date as date_type, timedelta
from typing import Dict, List, Optional, Tuple

from models import (
    BiweeklyRecurrence,
    Event,
    EventMetadata,
    EventType,
    MonthlyRecurrence,
    Occurrence,
    Priority,
    Recurrence,
    UnsupportedRecurrence,
    WeeklyActivity,
    WeeklyRecurrence,
    format_minutes,
)
from .state import BuildLog
from .timeutils import parse_time, weekday_name

logger = logging.getLogger(__name__)

DEFAULT_ACTIVITY_TRAVEL_MINUTES = 15
MAX_LOOKAHEAD_DAYS = 365
MAX_ITERATIONS = 400

DAY_SHORT_NAMES = {
    "monday": "Mon", "tuesday": "Tue", "wednesday": "Wed", "thursday": "Thu",
    "friday": "Fri", "saturday": "Sat", "sunday": "Sun",
}


class RecurrenceSkipped(Exception):
    """The rule can never match (e.g. biweekly without an anchor date)."""


def effective_recurrence(activity: WeeklyActivity) -> Recurrence:
    """Activities without an explicit rule repeat weekly on their schedule days."""
    schedule_days = activity.schedule.days if activity.schedule else []
    rule = activity.recurrence or WeeklyRecurrence(days=schedule_days)
    if isinstance(rule, (WeeklyRecurrence, BiweeklyRecurrence)) and not rule.days:
        rule = rule.model_copy(update={"days": schedule_days})
    return rule


def _evaluate(activity: WeeklyActivity, day: date_type) -> bool:
    """Raises RecurrenceSkipped when the rule cannot match any date."""
    rule = effective_recurrence(activity)
    day_name = weekday_name(day)

    if isinstance(rule, WeeklyRecurrence):
        return day_name in [d.lower() for d in rule.days]

    if isinstance(rule, UnsupportedRecurrence):
        raise RecurrenceSkipped(f"recurrence kind '{rule.requested}' is not supported")

    # The rule's own anchor wins over the activity's
    start_date = rule.start_date or activity.start_date

    if isinstance(rule, BiweeklyRecurrence):
        if start_date is None:
            raise RecurrenceSkipped("biweekly recurrence has no start date")
        weeks_diff = (day - start_date).days // 7
        return weeks_diff % 2 == 0 and day_name in [d.lower() for d in rule.days]

    if isinstance(rule, MonthlyRecurrence):
        if rule.month_type != "same_date":
            raise RecurrenceSkipped(f"monthly type '{rule.month_type}' is not supported")
        if start_date is None:
            raise RecurrenceSkipped("monthly recurrence has no start date")
        return day.day == start_date.day

    raise RecurrenceSkipped(f"unknown recurrence kind for {activity.key}")


def occurs_on(activity: WeeklyActivity, day: date_type) -> bool:
    """Public predicate: any failure means 'does not occur'."""
    try:
        return _evaluate(activity, day)
    except RecurrenceSkipped:
        return False
    except (ValueError, TypeError, AttributeError) as e:
        logger.warning(f"Recurrence check failed for {activity.key} on {day}: {e}")
        return False


def build_activity_event(activity: WeeklyActivity, day: str, child_id: str) -> Event:
    """Materialise one occurrence. Raises ValueError on a bad time or duration."""
    schedule = activity.schedule
    start = parse_time(schedule.start_time)
    travel = DEFAULT_ACTIVITY_TRAVEL_MINUTES
    if activity.location and activity.location.travel_time is not None:
        travel = activity.location.travel_time

    return Event(
        id=f"activity-{activity.key}-{day}",
        title=activity.name,
        type=EventType.ACTIVITY,
        start_minute=start,
        end_minute=start + schedule.duration_minutes,
        priority=Priority.MEDIUM,
        is_fixed=False,
        child_id=child_id,
        responsibility=activity.responsibility,
        location=activity.location,
        metadata=EventMetadata(
            category=activity.category or "activity",
            is_recurring=True,
            travel_time=travel,
            equipment=list(activity.equipment),
            preparation=list(activity.preparation),
            contact=activity.contact
        )
    )


def expand_recurring_activities(
    activities: List[WeeklyActivity],
    dates: List[Tuple[str, date_type]],
    child_id: str,
    log: BuildLog
) -> Dict[str, List[Event]]:
    """
    Expand every activity across the given (weekday, date) pairs.
    One bad activity is recorded and skipped; the others are unaffected.
    """
    events: Dict[str, List[Event]] = {day: [] for day, _ in dates}

    for activity in activities:
        if activity.schedule is None:
            continue

        for day, day_date in dates:
            try:
                if not _evaluate(activity, day_date):
                    continue
                events[day].append(build_activity_event(activity, day, child_id))
            except RecurrenceSkipped as e:
                log.record_skip("recurrence_skipped", f"{activity.name or activity.key}: {e}",
                                record_id=activity.key, level="info")
                break
            except ValueError as e:
                code = "invalid_duration" if activity.schedule.duration_minutes <= 0 else "invalid_time"
                log.record_skip(code, f"{activity.name or activity.key} omitted: {e}",
                                record_id=activity.key)
                break
            except (TypeError, AttributeError) as e:
                log.record_skip("recurrence_error", f"{activity.name or activity.key}: {e}",
                                record_id=activity.key)
                break

    return events


def next_occurrences(
    activity: WeeklyActivity,
    count: int = 10,
    now: Optional[date_type] = None,
    log: Optional[BuildLog] = None
) -> List[Occurrence]:
    """
    Walk forward day by day from 'now' and return the first 'count' matching dates.
    Bounded to one year ahead.
    """
    if now is None:
        raise ValueError("next_occurrences needs an explicit reference date")
    if activity.schedule is None or not activity.schedule.start_time:
        return []

    try:
        start_time = format_minutes(parse_time(activity.schedule.start_time))
    except ValueError as e:
        if log is not None:
            log.record_skip("invalid_time", f"{activity.name or activity.key} omitted: {e}",
                            record_id=activity.key)
        return []

    occurrences: List[Occurrence] = []
    current = now
    max_date = now + timedelta(days=MAX_LOOKAHEAD_DAYS)
    iterations = 0

    while len(occurrences) < count and current < max_date and iterations < MAX_ITERATIONS:
        iterations += 1
        try:
            if _evaluate(activity, current):
                occurrences.append(Occurrence(
                    date=current,
                    start_time=start_time,
                    duration_minutes=activity.schedule.duration_minutes,
                    location=activity.location
                ))
        except RecurrenceSkipped as e:
            if log is not None:
                log.record_skip("recurrence_skipped", f"{activity.name or activity.key}: {e}",
                                record_id=activity.key, level="info")
            return []
        current += timedelta(days=1)

    return occurrences


def describe_recurrence(activity: WeeklyActivity) -> str:
    """Human-readable summary, e.g. 'Weekly on Tue, Thu'."""
    rule = effective_recurrence(activity)
    if isinstance(rule, UnsupportedRecurrence):
        return f"Custom recurrence ({rule.requested or 'unspecified'})"
    if isinstance(rule, MonthlyRecurrence):
        if rule.month_type == "same_date":
            return "Monthly on the same date"
        return "Monthly on the same weekday"

    days = ", ".join(DAY_SHORT_NAMES.get(d.lower(), d) for d in rule.days)
    if isinstance(rule, BiweeklyRecurrence):
        return f"Every 2 weeks on {days}"
    return f"Weekly on {days}"
