"""
The Weekly Schedule Engine.

This module implements the per-child generation pipeline:
1. Fixed commitments (school blocks, daily routine) are placed first.
2. Recurring activities are expanded for the concrete dates of the week.
3. The assembled days are validated, free time is derived, and the
   week is scored.

Each call builds everything from scratch and returns a value object;
nothing is cached or shared between calls, so children can be
generated in parallel.
"""

import logging
from datetime import date as date_type
from typing import Dict, List, Optional

from models import ChildProfile, Conflict, DaySchedule, ScheduleResult, Suggestion, WeeklySchedule
from .builders import build_routine_events, build_school_events
from .config import SchedulerConfig
from .constraints import ConflictValidator
from .recurrence import expand_recurring_activities
from .routine_checks import review_routine
from .scoring import BalanceScorer, build_metadata
from .state import BuildLog
from .suggestions import SuggestionEngine, find_free_slots
from .timeutils import age_group_for, monday_of, week_dates

logger = logging.getLogger(__name__)


class WeeklyScheduleGenerator:
    """
    Main scheduling engine for one child.
    Ingests a ChildProfile, outputs a ScheduleResult.
    """

    def __init__(
        self,
        child: ChildProfile,
        week_start: date_type,
        reference_date: Optional[date_type] = None,
        config: Optional[SchedulerConfig] = None
    ):
        self.child = child
        self.week_start = monday_of(week_start)
        # Without an explicit reference date, the week itself is the reference
        self.reference_date = reference_date or self.week_start
        self.config = config or SchedulerConfig()

        self.age_group = age_group_for(child.date_of_birth, self.reference_date)
        self.rules = self.config.rules_for(self.age_group)
        self.log = BuildLog(child.id)

    def run(self) -> ScheduleResult:
        """
        Execute the generation pipeline.
        """
        logger.info(f"Generating week of {self.week_start} for {self.child.name or self.child.id} "
                    f"({self.age_group.value})")
        dates = week_dates(self.week_start)

        # 1. Fixed events: school first, then the daily routine
        days: Dict[str, DaySchedule] = {}
        for day_name, day_date in dates:
            day = DaySchedule(date=day_date)
            for event in build_school_events(self.child.school_schedule.get(day_name, []), day_name, self.child.id, self.log):
                day.add_event(event)
            for event in build_routine_events(self.child.daily_routine, day_name, self.child.id, self.log):
                day.add_event(event)
            days[day_name] = day

        # 2. Recurring activities for the concrete dates of this week
        for rejected in self.child.rejected_activities:
            self.log.record_skip(
                "invalid_record",
                f"Activity {rejected.name or rejected.index} skipped: {rejected.error}",
                record_id=rejected.record_id or str(rejected.index)
            )
        recurring = expand_recurring_activities(self.child.weekly_activities, dates, self.child.id, self.log)
        for day_name, events in recurring.items():
            for event in events:
                days[day_name].add_event(event)

        schedule = WeeklySchedule(child_id=self.child.id, week_start=self.week_start, days=days)

        # 3. Free time, conflicts and per-day suggestions
        validator = ConflictValidator(self.rules)
        suggester = SuggestionEngine(self.config)
        conflicts: List[Conflict] = []
        suggestions: List[Suggestion] = []

        for day_name, day in days.items():
            day.free_time_slots = find_free_slots(day, self.config)
            conflicts.extend(validator.validate_day(day_name, day))
            suggestions.extend(suggester.suggest_for_day(day_name, day))
            logger.debug(f"{day_name}: {len(day.events)} events, {day.free_minutes} free minutes")

        # 4. Weekly balance
        suggestions.extend(suggester.suggest_for_week(schedule))

        # 5. Score and summarise
        balance_score = BalanceScorer(self.config.balance).score(schedule, conflicts, self.rules)
        metadata = build_metadata(
            schedule, conflicts, len(suggestions), self.age_group, self.rules, balance_score, self.reference_date
        )

        logger.info(f"Finished {self.child.id}: {metadata.total_activities} activities, "
                    f"{len(conflicts)} conflicts, balance {balance_score}")
        if self.log:
            logger.info(f"Skipped records for {self.child.id}: {self.log.get_failure_report()}")

        return ScheduleResult(
            child_id=self.child.id,
            schedule=schedule,
            conflicts=conflicts,
            suggestions=suggestions,
            metadata=metadata,
            routine_review=review_routine(self.child.daily_routine, self.age_group) if self.child.daily_routine else None,
            diagnostics=list(self.log.diagnostics)
        )


def generate_weekly_schedule(
    child: ChildProfile,
    week_start: date_type,
    reference_date: Optional[date_type] = None,
    config: Optional[SchedulerConfig] = None
) -> ScheduleResult:
    """Build one child's week. Safe to call concurrently for different children."""
    return WeeklyScheduleGenerator(child, week_start, reference_date, config).run()
