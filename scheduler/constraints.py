"""
Conflict Validation Logic.

This module answers the question: "What is wrong with this day?"
It runs after every event of a day has been placed and sorted, and
reports problems without moving anything. All checks are independent,
so a single day can yield several conflicts of different types.
"""

import logging
from typing import List, Optional

from models import Conflict, ConflictType, DaySchedule, Event, EventType, Severity

from .config import SchedulingRules

logger = logging.getLogger(__name__)


def is_nap(event: Event) -> bool:
    return event.metadata.routine_kind == "nap"


class ConflictValidator:
    """
    Validates one child's days against the age-group rule table.
    Holds no state between calls.
    """

    def __init__(self, rules: SchedulingRules):
        self.rules = rules

    def validate_day(self, day_name: str, day: DaySchedule) -> List[Conflict]:
        """
        Master validation function. Returns every conflict found for the day.
        """
        conflicts: List[Conflict] = []

        # 1. Physical reality: two things cannot happen at once
        conflicts.extend(self._check_overlaps(day_name, day.events))

        # 2. Daily load against the age-group maximum
        conflict = self._check_overload(day_name, day)
        if conflict:
            conflicts.append(conflict)

        # 3. Keep a buffer around every nap
        if self.rules.nap_time_protection > 0:
            conflicts.extend(self._check_nap_protection(day_name, day.events))

        # 4. Attention span: no over-long activities
        conflicts.extend(self._check_durations(day_name, day.events))

        if conflicts:
            logger.debug(f"{day_name}: {len(conflicts)} conflict(s)")
        return conflicts

    def _check_overlaps(self, day_name: str, events: List[Event]) -> List[Conflict]:
        """
        Events are sorted by start, so comparing neighbours is enough
        to tell whether any overlap exists on the day.
        """
        conflicts = []
        for current, following in zip(events, events[1:]):
            if current.end_minute > following.start_minute:
                conflicts.append(Conflict(
                    type=ConflictType.OVERLAP,
                    severity=Severity.HIGH,
                    day=day_name,
                    events=[current, following],
                    message=f"{current.title} overlaps with {following.title}",
                    suggestion="Move one of the events or shorten the earlier one"
                ))
        return conflicts

    def _check_overload(self, day_name: str, day: DaySchedule) -> Optional[Conflict]:
        limit = self.rules.max_activities_per_day
        if day.activity_count <= limit:
            return None

        return Conflict(
            type=ConflictType.OVERLOAD,
            severity=Severity.MEDIUM,
            day=day_name,
            events=[e for e in day.events if e.counts_as_activity],
            message=f"Too many activities on {day_name} ({day.activity_count}/{limit})",
            suggestion="Move some activities to a lighter day"
        )

    def _check_nap_protection(self, day_name: str, events: List[Event]) -> List[Conflict]:
        """
        Flags anything ending in [napStart - buffer, napStart] or
        starting in [napEnd, napEnd + buffer]. One conflict per nap.
        """
        buffer = self.rules.nap_time_protection
        conflicts = []

        for nap in filter(is_nap, events):
            intruders = [
                other for other in events
                if other is not nap and (
                    nap.start_minute - buffer <= other.end_minute <= nap.start_minute
                    or nap.end_minute <= other.start_minute <= nap.end_minute + buffer
                )
            ]
            if intruders:
                conflicts.append(Conflict(
                    type=ConflictType.NAP_PROTECTION,
                    severity=Severity.MEDIUM,
                    day=day_name,
                    events=[nap] + intruders,
                    message=f"{len(intruders)} event(s) too close to nap at {nap.start_time}",
                    suggestion=f"Keep {buffer} minutes free before and after nap time"
                ))
        return conflicts

    def _check_durations(self, day_name: str, events: List[Event]) -> List[Conflict]:
        limit = self.rules.max_activity_duration
        return [
            Conflict(
                type=ConflictType.DURATION,
                severity=Severity.LOW,
                day=day_name,
                events=[event],
                message=f"{event.title} runs {event.duration_minutes} minutes (max {limit})",
                suggestion="Consider a shorter session or adding a break"
            )
            for event in events
            if event.type == EventType.ACTIVITY and event.duration_minutes > limit
        ]
