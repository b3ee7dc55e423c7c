"""
Free time and improvement suggestions.

Free time is what is left of the day window once every event is
blocked out. Suggestions are advisory only; nothing here changes a schedule.
"""

import logging
from typing import List

from models import DaySchedule, FreeTimeSlot, Severity, Suggestion, SuggestionType, WeeklySchedule

from .config import SchedulerConfig
from .timeutils import complement_intervals

logger = logging.getLogger(__name__)

OUTDOOR = "outdoor"


def find_free_slots(day: DaySchedule, config: SchedulerConfig) -> List[FreeTimeSlot]:
    """
    Gaps inside the day window not covered by any event, at least
    'min_free_slot_minutes' long, in ascending order.
    """
    busy = [(e.start_minute, e.end_minute) for e in day.events]
    gaps = complement_intervals(busy, config.day_window)
    return [
        FreeTimeSlot(start_minute=start, end_minute=end)
        for start, end in gaps
        if end - start >= config.min_free_slot_minutes
    ]


def has_outdoor_event(day: DaySchedule) -> bool:
    for event in day.events:
        if event.metadata.category == OUTDOOR:
            return True
        if event.location and event.location.type == OUTDOOR:
            return True
    return False


class SuggestionEngine:
    """Turns free time and weekly load into advisory suggestions."""

    def __init__(self, config: SchedulerConfig):
        self.thresholds = config.thresholds

    def suggest_for_day(self, day_name: str, day: DaySchedule) -> List[Suggestion]:
        suggestions = []

        # 1. Long gaps are good for unstructured play
        for slot in day.free_time_slots:
            if slot.duration >= self.thresholds.free_play_min_minutes:
                suggestions.append(Suggestion(
                    type=SuggestionType.FREE_PLAY,
                    priority=Severity.LOW,
                    day=day_name,
                    time_slot=slot,
                    message=f"{slot.duration} minutes free from {slot.start_time} to {slot.end_time}",
                    suggestion="Great time for unstructured free play"
                ))

        # 2. Some fresh air, if the day has room and none is planned
        if day.free_minutes >= self.thresholds.outdoor_min_free_minutes and not has_outdoor_event(day):
            suggestions.append(Suggestion(
                type=SuggestionType.OUTDOOR_TIME,
                priority=Severity.MEDIUM,
                day=day_name,
                message=f"No outdoor time planned on {day_name}",
                suggestion="Add at least 30 minutes of outdoor play"
            ))

        return suggestions

    def suggest_for_week(self, schedule: WeeklySchedule) -> List[Suggestion]:
        total_activities = sum(day.activity_count for day in schedule.days.values())
        total_free = sum(day.free_minutes for day in schedule.days.values())
        suggestions = []

        if total_activities > self.thresholds.max_weekly_activities:
            suggestions.append(Suggestion(
                type=SuggestionType.BALANCE,
                priority=Severity.HIGH,
                message=f"{total_activities} activities this week is a heavy load",
                suggestion="Consider dropping or spacing out some activities"
            ))

        if total_free < self.thresholds.min_weekly_free_minutes:
            suggestions.append(Suggestion(
                type=SuggestionType.BALANCE,
                priority=Severity.MEDIUM,
                message=f"Only {total_free} minutes of free time this week",
                suggestion="Add more unstructured time for rest and play"
            ))

        return suggestions
